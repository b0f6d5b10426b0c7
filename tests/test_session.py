"""Tests for REGISTER session identifiers."""

from sipprobe.sip.session import (
    RegisterSession,
    generate_branch,
    generate_call_id,
    generate_tag,
)


class TestIdentifiers:
    """Test identifier generation."""

    def test_branch_has_magic_cookie(self):
        """Test branch starts with the RFC 3261 magic cookie."""
        branch = generate_branch()

        assert branch.startswith("z9hG4bK-")
        assert len(branch) == len("z9hG4bK-") + 16

    def test_branches_unique(self):
        """Test consecutive branches differ."""
        assert len({generate_branch() for _ in range(100)}) == 100

    def test_tag_is_hex(self):
        """Test From tag format."""
        tag = generate_tag()

        assert len(tag) == 12
        int(tag, 16)

    def test_call_id_format(self):
        """Test Call-ID is millis@sip-test."""
        call_id = generate_call_id()
        millis, host = call_id.split("@")

        assert host == "sip-test"
        assert millis.isdigit()


class TestRegisterSession:
    """Test session lifecycle."""

    def test_initial_state(self):
        """Test a fresh session starts at CSeq 1 with no auth attempts."""
        session = RegisterSession()

        assert session.cseq == 1
        assert session.auth_attempts == 0
        assert session.branch.startswith("z9hG4bK")

    def test_next_attempt(self):
        """Test next attempt bumps CSeq and changes only the branch."""
        session = RegisterSession()
        call_id, tag, branch = session.call_id, session.from_tag, session.branch

        session.next_attempt()

        assert session.cseq == 2
        assert session.branch != branch
        assert session.call_id == call_id
        assert session.from_tag == tag
