from hostprovisioner.services.mysql_config import MySQLConfigService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None


def test_render_replaces_existing_setting():
    content = "[mysqld]\ndatadir=/var/lib/mysql\nbind-address=0.0.0.0\n"

    rendered = MySQLConfigService.render_bind_address(content, "127.0.0.1")

    assert rendered == "[mysqld]\ndatadir=/var/lib/mysql\nbind-address = 127.0.0.1\n"


def test_render_inserts_after_mysqld_section():
    content = "[client]\nport=3306\n[mysqld]\ndatadir=/var/lib/mysql\n"

    rendered = MySQLConfigService.render_bind_address(content, "0.0.0.0")

    assert rendered == (
        "[client]\nport=3306\n[mysqld]\nbind-address = 0.0.0.0\ndatadir=/var/lib/mysql\n"
    )


def test_render_appends_section_when_missing():
    rendered = MySQLConfigService.render_bind_address("[client]\nport=3306\n", "127.0.0.1")

    assert rendered == "[client]\nport=3306\n[mysqld]\nbind-address = 127.0.0.1\n"


def test_set_bind_address_creates_file_and_is_idempotent(tmp_path):
    config = tmp_path / "my.cnf"
    service = MySQLConfigService(logger=DummyLogger())

    assert service.set_bind_address(str(config), "127.0.0.1") is True
    assert service.set_bind_address(str(config), "127.0.0.1") is False
    assert service.read_bind_address(str(config)) == "127.0.0.1"

    assert service.set_bind_address(str(config), "0.0.0.0") is True
    assert config.read_text(encoding="utf-8").count("bind-address") == 1
    assert service.read_bind_address(str(config)) == "0.0.0.0"


def test_read_bind_address_without_file(tmp_path):
    service = MySQLConfigService(logger=DummyLogger())

    assert service.read_bind_address(str(tmp_path / "absent.cnf")) is None
