from myumc.utils.role_permissions import (
    role_allows_manage,
    role_allows_platform,
    role_allows_self_registration,
    RoleEnum,
)


class TestRoleGroups:
    """Unit tests for the role group helpers."""

    def test_manage_roles(self):
        assert role_allows_manage("Administrator")
        assert role_allows_manage("ChurchLeader")
        assert not role_allows_manage("Developer")
        assert not role_allows_manage("Member")
        assert not role_allows_manage(None)

    def test_platform_roles(self):
        assert role_allows_platform("Administrator")
        assert role_allows_platform("Developer")
        assert not role_allows_platform("ChurchLeader")
        assert not role_allows_platform("Guest")

    def test_self_registration_roles(self):
        assert role_allows_self_registration("Member")
        assert role_allows_self_registration("Guest")
        assert not role_allows_self_registration("Administrator")
        assert not role_allows_self_registration("ChurchLeader")

    def test_unknown_role_has_no_groups(self):
        assert not role_allows_manage("Pastor")
        assert not role_allows_platform("Pastor")
        assert not role_allows_self_registration("Pastor")

    def test_role_enum_values(self):
        assert {role.value for role in RoleEnum} == {"Administrator", "Developer", "Guest", "Member", "ChurchLeader"}
