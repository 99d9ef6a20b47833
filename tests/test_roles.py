"""Role gate dependencies, called directly without going through HTTP."""

import pytest

from app.core.deps import require_editor, require_role, require_viewer
from app.core.errors import PermissionDenied
from app.schemas.auth import CurrentUser


def test_matching_role_passes_caller_through():
    caller = CurrentUser(id="u1", roles=["viewer", "editor"])

    assert require_editor(current_user=caller) is caller
    assert require_viewer(current_user=caller) is caller


@pytest.mark.parametrize(
    "roles, role",
    [
        ([], "viewer"),
        (["viewer"], "editor"),
        (["editor"], "viewer"),  # no hierarchy
        (["Editor"], "editor"),  # exact match only
    ],
)
def test_missing_role_is_denied(roles, role):
    check = require_role(role)

    with pytest.raises(PermissionDenied) as exc_info:
        check(current_user=CurrentUser(id="u1", roles=roles))

    assert exc_info.value.status_code == 403
    assert str(exc_info.value) == f"{role.capitalize()} permissions required. Access denied."


def test_custom_role():
    check = require_role("auditor")

    assert check(current_user=CurrentUser(id="u1", roles=["auditor"])).id == "u1"
    with pytest.raises(PermissionDenied, match="Auditor permissions required"):
        check(current_user=CurrentUser(id="u1", roles=["viewer"]))
