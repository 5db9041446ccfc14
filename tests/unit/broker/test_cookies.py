"""
Tests unitaires MemoryCookieStore et rendu Set-Cookie.
"""

from datetime import datetime, timedelta, timezone

import pytest

from rhe_sso.broker import CookieSpec, ICookieStore, MemoryCookieStore, render_set_cookie


def future():
    return datetime.now(timezone.utc) + timedelta(hours=1)


class TestMemoryCookieStore:
    """Tests stockage en mémoire."""

    def test_implements_interface(self):
        assert isinstance(MemoryCookieStore(), ICookieStore)

    def test_from_header(self):
        store = MemoryCookieStore.from_header("sso_token_b=abc; sso_attached=1")
        assert store.get("sso_token_b") == "abc"
        assert store.get("sso_attached") == "1"

    @pytest.mark.parametrize(
        "foreign",
        ['prefs={"theme":"dark"}', "ga=GA1.2 3", "a=b\\c", "flag", "=orphan"],
    )
    def test_malformed_foreign_cookie_does_not_hide_token(self, foreign):
        """Un cookie tiers non standard placé avant le token ne le masque pas."""
        store = MemoryCookieStore.from_header(f"{foreign}; sso_token_b=tok-123; sso_attached=1")

        assert store.get("sso_token_b") == "tok-123"
        assert store.get("sso_attached") == "1"

    def test_quoted_value_unwrapped(self):
        assert MemoryCookieStore.from_header('sso_token_b="abc"').get("sso_token_b") == "abc"

    def test_from_empty_header(self):
        assert MemoryCookieStore.from_header("").get("anything") is None

    def test_set_many_applies_all_writes(self):
        store = MemoryCookieStore()
        store.set_many([CookieSpec("a", "1", future()), CookieSpec("b", "2", future())])

        assert store.get("a") == "1"
        assert store.get("b") == "2"
        assert [c.name for c in store.pending()] == ["a", "b"]

    def test_expired_write_removes_value(self):
        store = MemoryCookieStore({"a": "1"})
        store.set_many([CookieSpec("a", "", datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc))])

        assert store.get("a") is None

    def test_header_values_flush(self):
        store = MemoryCookieStore()
        store.set_many([CookieSpec("a", "1", future())])

        assert len(store.header_values()) == 1
        assert store.pending() == []


class TestRenderSetCookie:
    """Tests rendu des en-têtes Set-Cookie."""

    def test_http_only_secure_cookie(self):
        value = render_set_cookie(
            CookieSpec("sso_token_b", "abc", datetime(2030, 1, 1, tzinfo=timezone.utc), domain="rhe.test")
        )

        assert value.startswith("sso_token_b=abc")
        assert "expires=Tue, 01 Jan 2030 00:00:00 GMT" in value
        assert "Domain=rhe.test" in value
        assert "Path=/" in value
        assert "Secure" in value
        assert "HttpOnly" in value

    def test_flag_cookie_readable_by_client(self):
        value = render_set_cookie(CookieSpec("sso_attached", "1", future(), http_only=False, secure=False))

        assert "HttpOnly" not in value
        assert "Secure" not in value
