"""Tests for the CSRF token store."""

import threading

from fittrack.services.csrf_tokens import (
    REJECTION_MESSAGES,
    CsrfTokenStore,
    TokenStatus,
)

DAY = 24 * 60 * 60


class TestIssueToken:
    """Tests for token issuance."""

    def test_token_is_256_bit_hex(self, csrf_store):
        token = csrf_store.issue_token()

        assert len(token) == 64
        int(token, 16)  # hex

    def test_tokens_are_unique(self, csrf_store):
        tokens = {csrf_store.issue_token() for _ in range(100)}
        assert len(tokens) == 100

    def test_record_created_unused(self, csrf_store, clock):
        token = csrf_store.issue_token()

        record = csrf_store.lookup(token)
        assert record is not None
        assert record.created_at == clock.now
        assert record.used is False


class TestValidate:
    """Tests for token validation."""

    def test_fresh_token_is_valid(self, csrf_store):
        token = csrf_store.issue_token()
        assert csrf_store.validate(token) is TokenStatus.VALID

    def test_token_reusable_until_expiry(self, csrf_store):
        token = csrf_store.issue_token()

        assert csrf_store.validate(token) is TokenStatus.VALID
        assert csrf_store.validate(token) is TokenStatus.VALID
        assert csrf_store.lookup(token).used is False

    def test_missing_token(self, csrf_store):
        assert csrf_store.validate(None) is TokenStatus.MISSING
        assert csrf_store.validate("") is TokenStatus.MISSING

    def test_unknown_token(self, csrf_store):
        assert csrf_store.validate("ab" * 32) is TokenStatus.INVALID

    def test_valid_at_exact_ttl(self, csrf_store, clock):
        token = csrf_store.issue_token()
        clock.advance(DAY)

        assert csrf_store.validate(token) is TokenStatus.VALID

    def test_expired_token_is_purged(self, csrf_store, clock):
        token = csrf_store.issue_token()
        clock.advance(DAY + 1)

        assert csrf_store.validate(token) is TokenStatus.EXPIRED
        assert csrf_store.lookup(token) is None
        # Once purged the token is simply unknown
        assert csrf_store.validate(token) is TokenStatus.INVALID

    def test_one_time_use(self, clock):
        store = CsrfTokenStore(one_time_use=True, clock=clock)
        token = store.issue_token()

        assert store.validate(token) is TokenStatus.VALID
        assert store.lookup(token).used is True
        assert store.validate(token) is TokenStatus.USED

    def test_rejection_messages(self):
        assert REJECTION_MESSAGES[TokenStatus.MISSING] == "CSRF token missing"
        assert REJECTION_MESSAGES[TokenStatus.INVALID] == "Invalid CSRF token"
        assert REJECTION_MESSAGES[TokenStatus.EXPIRED] == "CSRF token expired"


class TestCleanup:
    """Tests for the expiry sweep."""

    def test_removes_only_expired(self, csrf_store, clock):
        old = csrf_store.issue_token()
        clock.advance(DAY - 10)
        recent = csrf_store.issue_token()
        clock.advance(11)

        removed = csrf_store.cleanup_expired()

        assert removed == 1
        assert csrf_store.lookup(old) is None
        assert csrf_store.lookup(recent) is not None
        assert len(csrf_store) == 1

    def test_swept_token_reported_as_expired(self, csrf_store, clock):
        """A request racing the sweep gets the expiry rejection, not 'invalid'."""
        token = csrf_store.issue_token()
        clock.advance(DAY + 1)
        csrf_store.cleanup_expired()

        assert csrf_store.lookup(token) is None
        assert csrf_store.validate(token) is TokenStatus.EXPIRED

    def test_swept_tokens_forgotten_after_next_sweep(self, csrf_store, clock):
        token = csrf_store.issue_token()
        clock.advance(DAY + 1)
        csrf_store.cleanup_expired()
        csrf_store.cleanup_expired()

        assert csrf_store.validate(token) is TokenStatus.INVALID

    def test_cleanup_on_empty_store(self, csrf_store):
        assert csrf_store.cleanup_expired() == 0

    def test_revoke(self, csrf_store):
        token = csrf_store.issue_token()

        assert csrf_store.revoke(token) is True
        assert csrf_store.revoke(token) is False
        assert csrf_store.validate(token) is TokenStatus.INVALID


class TestConcurrency:
    """Tests for concurrent access."""

    def test_concurrent_issue_and_sweep(self, csrf_store):
        tokens: list[str] = []
        tokens_lock = threading.Lock()

        def issue():
            for _ in range(200):
                token = csrf_store.issue_token()
                with tokens_lock:
                    tokens.append(token)

        def sweep():
            for _ in range(50):
                csrf_store.cleanup_expired()

        threads = [threading.Thread(target=issue) for _ in range(4)]
        threads.append(threading.Thread(target=sweep))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(csrf_store) == 800
        assert all(csrf_store.validate(t) is TokenStatus.VALID for t in tokens)
