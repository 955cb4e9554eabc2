import pytest
from starlette.requests import Request

from workforce_api.auth.deps import require_admin, require_roles
from workforce_api.errors import Forbidden, Unauthorized


def _request(identity=None):
    request = Request({"type": "http", "method": "GET", "path": "/", "headers": []})
    if identity is not None:
        request.state.identity = identity
    return request


def test_role_check_fails_closed_without_identity():
    check = require_roles("admin")
    # even if a caller hands in a user, the attached identity is what counts
    with pytest.raises(Unauthorized):
        check(_request(), {"id": 1, "role": "admin"})


def test_role_check_admits_matching_role():
    identity = {"id": 1, "role": "admin", "iat": 0, "exp": 1}
    assert require_admin(_request(identity), identity) == identity


def test_role_check_rejects_other_roles():
    identity = {"id": 2, "role": "user"}
    with pytest.raises(Forbidden) as ei:
        require_admin(_request(identity), identity)
    assert ei.value.status_code == 403
    assert ei.value.message == "Forbidden: insufficient role"


def test_role_check_with_several_roles():
    check = require_roles("admin", "manager")

    manager = {"id": 3, "role": "manager"}
    assert check(_request(manager), manager) == manager

    admin = {"id": 1, "role": "admin"}
    assert check(_request(admin), admin) == admin

    user = {"id": 4, "role": "user"}
    with pytest.raises(Forbidden):
        check(_request(user), user)

    nobody = {"id": 5, "role": None}
    with pytest.raises(Forbidden):
        check(_request(nobody), nobody)
