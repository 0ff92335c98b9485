from location_hub.core.config import Settings


class TestSettings:
    """설정 기본값 테스트"""

    def test_static_dir_defaults_to_static(self, monkeypatch):
        monkeypatch.delenv("STATIC_DIR", raising=False)

        assert Settings(_env_file=None).static_dir == "static"

    def test_empty_static_dir_disables_hosting(self, monkeypatch):
        monkeypatch.setenv("STATIC_DIR", "")

        assert not Settings(_env_file=None).static_dir

    def test_default_room(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_ROOM", raising=False)

        assert Settings(_env_file=None).default_room == "sala1"
