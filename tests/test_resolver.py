import asyncio

import pytest

from handle_resolver.models import AvailabilityResult, HandleStatus
from handle_resolver.resolver import HandleResolver, interpret_availability

DEBOUNCE = 0.01


class FakeChecker:
    """Availability collaborator that records calls and answers from a table."""

    def __init__(self, answers=None, default=True):
        self.calls = []
        self._answers = answers or {}
        self._default = default

    async def __call__(self, handle):
        self.calls.append(handle)
        answer = self._answers.get(handle, self._default)
        if isinstance(answer, Exception):
            raise answer
        return answer


async def _no_identity(handle):
    raise AssertionError("identity creation must not run in these tests")


async def _settle(seconds=DEBOUNCE * 5):
    await asyncio.sleep(seconds)


@pytest.mark.asyncio
async def test_initial_state_is_empty():
    r = HandleResolver(FakeChecker(), _no_identity)
    assert r.status == HandleStatus.empty
    assert r.reason is None
    assert r.candidate is None
    assert r.pending_query_id == 0


@pytest.mark.asyncio
async def test_empty_input_resets_state_without_query():
    checker = FakeChecker()
    r = HandleResolver(checker, _no_identity, debounce_seconds=DEBOUNCE)
    r.on_input_changed("validname")
    r.on_input_changed("  @ ")
    assert r.status == HandleStatus.empty
    assert r.reason is None
    assert r.candidate is None
    await _settle()
    assert checker.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text,reason",
    [
        ("Al", "too short"),
        ("x" * 21, "too long"),
        ("bad-name", "invalid characters"),
        ("admin", "reserved"),
        ("@ADMIN", "reserved"),
        ("  @Root ", "reserved"),
    ],
)
async def test_invalid_input_never_queries(text, reason):
    checker = FakeChecker()
    r = HandleResolver(checker, _no_identity, debounce_seconds=DEBOUNCE)
    r.on_input_changed(text)
    assert r.status == HandleStatus.invalid
    assert r.reason == reason
    assert r.candidate == text.lower().replace("@", "").strip()
    await _settle()
    assert checker.calls == []
    assert r.status == HandleStatus.invalid


@pytest.mark.asyncio
async def test_valid_input_is_checking_then_available():
    checker = FakeChecker(default=True)
    r = HandleResolver(checker, _no_identity, debounce_seconds=DEBOUNCE)
    r.on_input_changed("@ValidName")
    assert r.status == HandleStatus.checking
    assert r.reason is None
    assert r.candidate == "validname"
    assert checker.calls == []

    await _settle()
    assert checker.calls == ["validname"]
    assert r.status == HandleStatus.available
    assert r.reason is None


@pytest.mark.asyncio
async def test_taken_sets_reason_with_at_prefix():
    checker = FakeChecker(answers={"validname": False})
    r = HandleResolver(checker, _no_identity, debounce_seconds=DEBOUNCE)
    r.on_input_changed("validname")
    await _settle()
    assert r.status == HandleStatus.taken
    assert r.reason == "@validname is already taken"


@pytest.mark.asyncio
async def test_rapid_typing_issues_one_query_for_final_candidate():
    checker = FakeChecker()
    r = HandleResolver(checker, _no_identity, debounce_seconds=0.05)
    for text in ["v", "va", "val", "vali", "valid", "validn", "validname"]:
        r.on_input_changed(text)
        await asyncio.sleep(0.005)
    await _settle(0.15)
    assert checker.calls == ["validname"]
    assert r.status == HandleStatus.available


@pytest.mark.asyncio
async def test_reason_cleared_when_leaving_invalid():
    checker = FakeChecker()
    r = HandleResolver(checker, _no_identity, debounce_seconds=DEBOUNCE)
    r.on_input_changed("ab")
    assert r.reason == "too short"
    r.on_input_changed("abc")
    assert r.status == HandleStatus.checking
    assert r.reason is None


@pytest.mark.asyncio
async def test_pending_query_id_increases_on_every_change():
    r = HandleResolver(FakeChecker(), _no_identity, debounce_seconds=DEBOUNCE)
    ids = []
    for text in ["abc", "", "a", "abcd"]:
        r.on_input_changed(text)
        ids.append(r.pending_query_id)
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


@pytest.mark.asyncio
async def test_welcome_flow_scenario():
    checker = FakeChecker(answers={"validname": False, "validname2": True})
    r = HandleResolver(checker, _no_identity)  # default 500ms debounce

    r.on_input_changed("Al")
    assert (r.status, r.reason) == (HandleStatus.invalid, "too short")

    r.on_input_changed("admin")
    assert (r.status, r.reason) == (HandleStatus.invalid, "reserved")

    r.on_input_changed("validname")
    assert r.status == HandleStatus.checking
    await asyncio.sleep(0.65)
    assert checker.calls == ["validname"]
    assert r.status == HandleStatus.taken
    assert r.reason == "@validname is already taken"

    # Typing again before the debounce fires cancels the pending check entirely.
    r.on_input_changed("validname")
    await asyncio.sleep(0.1)
    r.on_input_changed("validname2")
    await asyncio.sleep(0.65)
    assert checker.calls == ["validname", "validname2"]
    assert r.status == HandleStatus.available
    r.dispose()


@pytest.mark.asyncio
async def test_listeners_receive_snapshots_and_can_unsubscribe():
    r = HandleResolver(FakeChecker(), _no_identity, debounce_seconds=DEBOUNCE)
    seen = []
    unsubscribe = r.add_listener(seen.append)

    r.on_input_changed("ab")
    r.on_input_changed("abc")
    await _settle()

    assert [s.status for s in seen] == [HandleStatus.invalid, HandleStatus.checking, HandleStatus.available]
    assert seen[0].message() == "too short"
    assert seen[1].message() == "Checking availability..."
    assert seen[2].message() == "@abc is available!"

    unsubscribe()
    r.on_input_changed("")
    assert len(seen) == 3


@pytest.mark.asyncio
async def test_listener_errors_do_not_break_state_updates():
    r = HandleResolver(FakeChecker(), _no_identity, debounce_seconds=DEBOUNCE)

    def boom(snapshot):
        raise RuntimeError("listener failed")

    r.add_listener(boom)
    r.on_input_changed("abc")
    await _settle()
    assert r.status == HandleStatus.available


def test_interpret_availability_clean_and_malformed_answers():
    assert interpret_availability(True) is True
    assert interpret_availability(False) is False
    assert interpret_availability({"available": False}) is False
    assert interpret_availability(AvailabilityResult(handle="abc", available=True)) is True

    assert interpret_availability(None) is None
    assert interpret_availability({}) is None
    assert interpret_availability({"available": "false"}) is None
    assert interpret_availability({"available": 0}) is None
    assert interpret_availability(1) is None
    assert interpret_availability("taken") is None
