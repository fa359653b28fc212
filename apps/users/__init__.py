"""Users app package.

Defines the custom user model with its marketplace role. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout
the project.
"""
