"""Reviews app package: review model, review gate and review API."""
