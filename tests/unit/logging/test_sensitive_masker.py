"""
Tests unitaires: Logging - Sensitive Masker

Secrets broker, mots de passe, tokens et checksums JAMAIS en clair.
"""

from rhe_sso.logging import MASK_VALUE, SensitiveMasker


class TestSensitiveMasking:
    """Tests masquage des données jointes aux logs."""

    def test_password_masked(self) -> None:
        result = SensitiveMasker().mask({"username": "john", "password": "secret123"})

        assert result == {"username": "john", "password": MASK_VALUE}

    def test_broker_secret_masked(self) -> None:
        result = SensitiveMasker().mask({"broker_id": "b", "broker_secret": "s3cret"})

        assert result == {"broker_id": "b", "broker_secret": MASK_VALUE}

    def test_attach_params_masked(self) -> None:
        """Token de session et checksum d'attachement masqués, broker lisible."""
        result = SensitiveMasker().mask({"broker": "b", "token": "abc", "checksum": "def"})

        assert result == {"broker": "b", "token": MASK_VALUE, "checksum": MASK_VALUE}

    def test_nested_headers_masked_case_insensitive(self) -> None:
        result = SensitiveMasker().mask({"headers": {"Authorization": "Bearer abc", "Accept": "application/json"}})

        assert result["headers"] == {"Authorization": MASK_VALUE, "Accept": "application/json"}

    def test_list_of_records_masked(self) -> None:
        result = SensitiveMasker().mask({"users": [{"email": "a@b.com", "password": "x"}]})

        assert result["users"] == [{"email": "a@b.com", "password": MASK_VALUE}]

    def test_original_not_modified(self) -> None:
        data = {"password": "secret", "nested": {"token": "t"}}
        SensitiveMasker().mask(data)

        assert data == {"password": "secret", "nested": {"token": "t"}}

    def test_scalars_untouched(self) -> None:
        assert SensitiveMasker().mask("attach") == "attach"


class TestPatterns:
    """Tests détection des clés sensibles."""

    def test_extra_patterns(self) -> None:
        masker = SensitiveMasker(extra_patterns=["licence_key"])
        assert masker.is_sensitive_key("LICENCE_KEY")

    def test_cookie_names_are_sensitive(self) -> None:
        assert SensitiveMasker().is_sensitive_key("sso_token_test_broker")
        assert SensitiveMasker().is_sensitive_key("Set-Cookie")

    def test_ordinary_keys_not_sensitive(self) -> None:
        masker = SensitiveMasker()
        assert masker.is_sensitive_key("") is False
        assert masker.is_sensitive_key("status_code") is False
