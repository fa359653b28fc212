import pytest
from rest_framework.exceptions import NotAuthenticated

from shared.domain.errors import DomainError
from shared.infrastructure.exception_handler import domain_exception_handler


@pytest.mark.parametrize(
    "error, status_code",
    [
        (DomainError.validation("bad"), 400),
        (DomainError.not_found("missing"), 404),
        (DomainError.conflict("taken"), 409),
        (DomainError.authorization("nope"), 403),
    ],
)
def test_domain_errors_map_to_status_codes(error, status_code):
    response = domain_exception_handler(error, {})

    assert response.status_code == status_code
    assert response.data == {"status": "error", "kind": error.kind.value, "message": error.message}


def test_drf_exceptions_keep_drf_handling():
    response = domain_exception_handler(NotAuthenticated(), {})

    assert response.status_code == 401
    assert "detail" in response.data


def test_unexpected_errors_are_opaque():
    response = domain_exception_handler(RuntimeError("database password is hunter2"), {})

    assert response.status_code == 500
    assert response.data == {"status": "error", "message": "Internal server error"}


def test_error_body_is_the_error_dict():
    error = DomainError.conflict("Property is already booked for these dates")

    assert error.to_dict() == {"kind": "conflict", "message": "Property is already booked for these dates"}
    assert domain_exception_handler(error, {}).data == {"status": "error", **error.to_dict()}
