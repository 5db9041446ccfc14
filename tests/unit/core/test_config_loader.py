"""
Tests unitaires pour ConfigLoader.
"""

import pytest

from rhe_sso.core import BrokerConfig
from rhe_sso.core.config_loader import ConfigIntegrityError, ConfigLoader

VALID_YAML = """
broker_id: my-broker
broker_secret: s3cret
api_endpoint: https://dev.sso.test/api
auth_endpoint: https://dev.sso.test/auth
cookie_lifetime: 600
secure_cookie: false
trusted: true
timeouts:
  connect_timeout: 2
  request_timeout: 5
"""


class TestConfigLoader:
    """Tests pour ConfigLoader."""

    def setup_method(self):
        """Setup avant chaque test."""
        self.loader = ConfigLoader()

    def test_load_valid_config(self, tmp_path):
        """Le chargement d'une config valide doit réussir."""
        path = tmp_path / "broker.yaml"
        path.write_text(VALID_YAML, encoding="utf-8")

        config = self.loader.load(str(path))

        assert isinstance(config, BrokerConfig)
        assert config.credentials.broker_id == "my-broker"
        assert config.cookie_lifetime == 600
        assert config.secure_cookie is False
        assert config.trusted is True
        assert config.timeouts.request_timeout == 5

    def test_load_missing_file_raises(self, tmp_path):
        """Fichier inexistant → ConfigIntegrityError."""
        with pytest.raises(ConfigIntegrityError) as exc_info:
            self.loader.load(str(tmp_path / "absent.yaml"))

        assert "Configuration non trouvée" in str(exc_info.value)

    def test_load_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("broker_id: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigIntegrityError, match="parsing YAML"):
            self.loader.load(str(path))

    def test_load_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigIntegrityError, match="objet YAML"):
            self.loader.load(str(path))

    def test_missing_required_field_raises(self):
        """Champ obligatoire manquant → ConfigIntegrityError."""
        with pytest.raises(ConfigIntegrityError, match="auth_endpoint"):
            self.loader.from_mapping(
                {"broker_id": "b", "broker_secret": "s", "api_endpoint": "https://x"}
            )

    def test_invalid_value_raises(self):
        with pytest.raises(ConfigIntegrityError, match="Configuration invalide"):
            self.loader.from_mapping(
                {
                    "broker_id": "b",
                    "broker_secret": "s",
                    "api_endpoint": "https://x",
                    "auth_endpoint": "https://x/auth",
                    "cookie_lifetime": -5,
                }
            )

    def test_invalid_timeout_raises(self):
        """Timeout hors bornes → ConfigIntegrityError."""
        with pytest.raises(ConfigIntegrityError):
            self.loader.from_mapping(
                {
                    "broker_id": "b",
                    "broker_secret": "s",
                    "api_endpoint": "https://x",
                    "auth_endpoint": "https://x/auth",
                    "timeouts": {"connect_timeout": 60},
                }
            )

    def test_reserved_credentials_key_raises(self):
        """Clé 'credentials' réservée → ConfigIntegrityError, jamais TypeError."""
        with pytest.raises(ConfigIntegrityError, match="credentials"):
            self.loader.from_mapping(
                {
                    "broker_id": "b",
                    "broker_secret": "s",
                    "api_endpoint": "https://x",
                    "auth_endpoint": "https://x/auth",
                    "credentials": {"broker_id": "other"},
                }
            )

    def test_non_string_key_raises(self, tmp_path):
        """Clé YAML non textuelle → ConfigIntegrityError."""
        path = tmp_path / "broker.yaml"
        path.write_text(VALID_YAML + "42: answer\n", encoding="utf-8")

        with pytest.raises(ConfigIntegrityError, match="Configuration invalide"):
            self.loader.load(str(path))
