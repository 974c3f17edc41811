"""
Command line tests using click's CliRunner
"""

import json
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from parkgolf_admin.api.exceptions import ServiceUnavailableException
from parkgolf_admin.cli.cli import cli


class TestRoleCommands:
    def test_roles_lists_every_role(self):
        result = CliRunner().invoke(cli, ["roles"])
        assert result.exit_code == 0
        for code in ("PLATFORM_OWNER", "COMPANY_MANAGER", "READONLY_STAFF"):
            assert code in result.output

    def test_permissions_of_role(self):
        result = CliRunner().invoke(cli, ["permissions", "STAFF"])
        assert result.exit_code == 0
        assert "MANAGE_BOOKINGS" in result.output
        assert "MANAGE_ADMINS" not in result.output

    def test_permissions_accepts_legacy_code(self):
        result = CliRunner().invoke(cli, ["permissions", "SUPER_ADMIN", "--expand"])
        assert result.exit_code == 0
        assert "PLATFORM_OWNER" in result.output
        assert "READ_ONLY" in result.output

    def test_unknown_role(self):
        result = CliRunner().invoke(cli, ["permissions", "GREENKEEPER"])
        assert result.exit_code == 2

    def test_check_granted(self):
        result = CliRunner().invoke(cli, ["check", "COMPANY_OWNER", "MANAGE_ADMINS"])
        assert result.exit_code == 0
        assert "has" in result.output

    def test_check_denied(self):
        result = CliRunner().invoke(cli, ["check", "STAFF", "MANAGE_ADMINS"])
        assert result.exit_code == 1
        assert "lacks" in result.output

    def test_check_wildcard(self):
        result = CliRunner().invoke(cli, ["check", "COMPANY_OWNER", "COMPANY_ANALYTICS"])
        assert result.exit_code == 0


class TestMigrateCommand:
    def test_migrates_record_list(self, tmp_path):
        source = tmp_path / "admins.json"
        target = tmp_path / "migrated.json"
        source.write_text(json.dumps({"admins": [
            {"id": 1, "role": "SUPER_ADMIN", "permissions": ["ALL"]},
            {"id": 2, "roleCode": "COMPANY_ADMIN", "companyId": 4},
        ]}))

        result = CliRunner().invoke(cli, ["migrate", str(source), "-o", str(target)])

        assert result.exit_code == 0
        migrated = json.loads(target.read_text())
        assert migrated == [
            {"id": 1, "roleCode": "PLATFORM_OWNER", "permissions": ["PLATFORM_ALL"]},
            {"id": 2, "roleCode": "COMPANY_OWNER", "companyId": 4, "permissions": []},
        ]

    def test_unknown_role_aborts(self, tmp_path):
        source = tmp_path / "admins.json"
        source.write_text(json.dumps([{"id": 1, "role": "ROOT"}]))
        result = CliRunner().invoke(cli, ["migrate", str(source), "-o", str(tmp_path / "out.json")])
        assert result.exit_code == 1
        assert "ROOT" in result.output

    def test_unknown_role_skipped_without_strict(self, tmp_path):
        source = tmp_path / "admins.json"
        target = tmp_path / "out.json"
        source.write_text(json.dumps([{"id": 1, "role": "ROOT"}, {"id": 2, "role": "VIEWER"}]))

        result = CliRunner().invoke(cli, ["migrate", str(source), "-o", str(target), "--no-strict"])

        assert result.exit_code == 0
        assert [r["id"] for r in json.loads(target.read_text())] == [2]

    def test_invalid_json(self, tmp_path):
        source = tmp_path / "admins.json"
        source.write_text("{not json")
        result = CliRunner().invoke(cli, ["migrate", str(source)])
        assert result.exit_code == 1


class TestLookupCommand:
    def test_prints_effective_permissions(self):
        record = {"id": 13, "roleCode": "STAFF", "companyId": 1, "courseIds": [100], "email": "staff@c.test"}
        with patch("parkgolf_admin.session.directory.GatewayAdminDirectory._request",
                   new_callable=AsyncMock, return_value=record):
            result = CliRunner().invoke(cli, ["lookup", "13", "--url", "http://gateway.test/api"])

        assert result.exit_code == 0
        assert "staff@c.test" in result.output
        assert "MANAGE_BOOKINGS" in result.output

    def test_gateway_unavailable(self):
        with patch("parkgolf_admin.session.directory.GatewayAdminDirectory._request",
                   new_callable=AsyncMock, side_effect=ServiceUnavailableException(detail="unavailable")):
            result = CliRunner().invoke(cli, ["lookup", "13", "--url", "http://gateway.test/api"])

        assert result.exit_code == 1
        assert "503" in result.output
