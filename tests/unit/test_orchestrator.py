"""
Unit tests for the batch orchestrator.

Covers ordering, per-item isolation, session release, cancellation,
deadlines and bounded concurrency, plus the two end-to-end batch scenarios
(three competitor URLs with one timeout, seven directories with two
unrecognised types).
"""

import asyncio

import pytest

from src.analysis.citations import summarize_submissions
from src.automation.extractor import TargetExtractor
from src.automation.queries import ExtractionProfile
from src.automation.session import AutomationSession
from src.automation.strategies import DEFAULT_DIRECTORIES, DirectoryDispatcher, SubmissionTimings
from src.batch import BatchOrchestrator, CancelToken
from src.batch.orchestrator import DEADLINE_MESSAGE
from src.core.exceptions import FailureReason, SessionStartFailed
from src.core.logging import NO_RUN, current_run_id
from src.models.results import Confidence, KeywordRanking, ResultStatus, SubmissionStatus
from src.models.targets import CompetitorURL, RankingTarget


class SleepRecorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _keywords(n: int):
    return [RankingTarget(keyword=f"kw{i}", business_name="Acme") for i in range(n)]


async def _rank(session, target):
    return KeywordRanking(keyword=target.keyword, ranking=1)


@pytest.fixture
def sleep():
    return SleepRecorder()


class TestConstruction:
    def test_rejects_negative_delay(self):
        with pytest.raises(ValueError, match="inter_item_delay"):
            BatchOrchestrator(inter_item_delay=-1)

    def test_rejects_zero_concurrency(self):
        with pytest.raises(ValueError, match="concurrency"):
            BatchOrchestrator(concurrency=0)

    def test_rejects_non_positive_deadline(self):
        with pytest.raises(ValueError, match="deadline_s"):
            BatchOrchestrator(deadline_s=0)


class TestSequential:
    async def test_results_in_target_order(self, sleep):
        targets = _keywords(4)
        report = await BatchOrchestrator(sleep=sleep).run_batch(targets, _rank)

        assert [r.keyword for r in report.results] == ["kw0", "kw1", "kw2", "kw3"]
        assert report.total == 4
        assert report.succeeded == 4
        assert report.cancelled is False

    async def test_delay_after_every_item(self, sleep):
        await BatchOrchestrator(inter_item_delay=2.0, sleep=sleep).run_batch(_keywords(3), _rank)
        assert sleep.calls == [2.0, 2.0, 2.0]

    async def test_zero_delay_never_sleeps(self, sleep):
        await BatchOrchestrator(inter_item_delay=0, sleep=sleep).run_batch(_keywords(3), _rank)
        assert sleep.calls == []

    async def test_escaped_exception_isolated(self, sleep, error_records):
        async def flaky(session, target):
            if target.keyword == "kw1":
                raise RuntimeError("lookup exploded")
            return await _rank(session, target)

        report = await BatchOrchestrator(sleep=sleep).run_batch(_keywords(3), flaky)

        assert [r.is_failed for r in report.results] == [False, True, False]
        assert report.results[1].failure == FailureReason.UNEXPECTED
        assert "lookup exploded" in report.results[1].error_message

        records = error_records()
        assert len(records) == 1
        assert records[0]["component"] == "orchestrator"
        assert records[0]["metadata"]["index"] == 1

    async def test_empty_batch_never_starts_browser(self, fake_session, sleep):
        report = await BatchOrchestrator(fake_session, sleep=sleep).run_batch([], _rank)
        assert report.total == 0
        assert fake_session.launch_count == 0

    async def test_process_steps_share_run_id(self, sleep, process_records):
        report = await BatchOrchestrator(batch_kind="rankings", sleep=sleep).run_batch(_keywords(2), _rank)

        records = process_records()
        assert [r["step"] for r in records] == [
            "batch_start", "item_complete", "item_complete", "batch_complete",
        ]
        assert {r["run_id"] for r in records} == {report.run_id}
        assert {r["batch_kind"] for r in records} == {"rankings"}
        assert records[-1]["metadata"] == {"succeeded": 2, "failed": 0, "cancelled": False}

    async def test_items_run_inside_run_context(self, sleep):
        seen = []

        async def item(session, target):
            seen.append(current_run_id())
            return await _rank(session, target)

        orchestrator = BatchOrchestrator(concurrency=2, sleep=sleep)
        report = await orchestrator.run_batch(_keywords(3), item)

        assert seen == [report.run_id] * 3
        assert current_run_id() == NO_RUN


class TestSessionOwnership:
    async def test_session_released_exactly_once(self, fake_session, fake_browser, sleep):
        async def use_page(session, target):
            async with session.page_scope():
                return await _rank(session, target)

        await BatchOrchestrator(fake_session, sleep=sleep).run_batch(_keywords(3), use_page)

        assert fake_session.launch_count == 1
        assert fake_session.release_count == 1
        assert fake_browser.close_count == 1
        assert fake_browser.contexts_closed == 3
        assert fake_session.is_live is False

    async def test_session_released_when_item_escapes(self, fake_session, fake_browser, sleep):
        async def broken(session, target):
            raise KeyError("bad")

        report = await BatchOrchestrator(fake_session, sleep=sleep).run_batch(_keywords(2), broken)

        assert report.failed == 2
        assert fake_session.release_count == 1

    async def test_session_start_failure_aborts_batch(self, sleep, process_records):
        async def launch(session):
            raise OSError("no chromium")

        session = AutomationSession(browser_factory=launch)
        with pytest.raises(SessionStartFailed):
            await BatchOrchestrator(session, sleep=sleep).run_batch(_keywords(2), _rank)

        last = process_records()[-1]
        assert last["step"] == "batch_complete"
        assert last["status"] == "failed"
        assert session.is_live is False

    async def test_session_start_failure_inside_item_aborts_batch(self, sleep):
        async def item(session, target):
            raise SessionStartFailed("browser crashed at launch")

        with pytest.raises(SessionStartFailed):
            await BatchOrchestrator(sleep=sleep).run_batch(_keywords(2), item)


class TestCancellation:
    async def test_cancel_between_items(self, sleep, process_records):
        token = CancelToken()

        async def cancel_after_second(session, target):
            if target.keyword == "kw1":
                token.cancel("user abort")
            return await _rank(session, target)

        report = await BatchOrchestrator(sleep=sleep).run_batch(_keywords(4), cancel_after_second, token)

        assert [r.keyword for r in report.results] == ["kw0", "kw1", "kw2", "kw3"]
        assert [r.is_failed for r in report.results] == [False, False, True, True]
        assert report.results[2].failure == FailureReason.CANCELLED
        assert report.results[2].error_message == "user abort"
        assert report.cancelled is True
        assert "batch_cancelled" in [r["step"] for r in process_records()]

    async def test_cancelled_before_start(self, fake_session, sleep):
        token = CancelToken()
        token.cancel()

        report = await BatchOrchestrator(fake_session, sleep=sleep).run_batch(_keywords(2), _rank, token)

        assert report.failed == 2
        assert fake_session.launch_count == 0

    async def test_first_reason_wins(self):
        token = CancelToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"


class TestDeadline:
    async def test_deadline_stops_remaining_items(self, sleep):
        clock = FakeClock()

        async def slow(session, target):
            clock.now += 6
            return await _rank(session, target)

        orchestrator = BatchOrchestrator(deadline_s=10, sleep=sleep, clock=clock)
        report = await orchestrator.run_batch(_keywords(4), slow)

        assert [r.is_failed for r in report.results] == [False, False, True, True]
        assert report.results[3].error_message == DEADLINE_MESSAGE
        assert report.cancelled is True

    async def test_deadline_bounds_in_flight_item(self, sleep):
        async def hangs(session, target):
            await asyncio.sleep(5)
            return await _rank(session, target)

        report = await BatchOrchestrator(deadline_s=0.05, sleep=sleep).run_batch(_keywords(2), hangs)

        assert [r.failure for r in report.results] == [FailureReason.CANCELLED, FailureReason.CANCELLED]
        assert report.results[0].error_message == DEADLINE_MESSAGE

    async def test_item_timeout_without_deadline_is_unexpected(self, sleep):
        async def times_out(session, target):
            raise asyncio.TimeoutError()

        report = await BatchOrchestrator(sleep=sleep).run_batch(_keywords(1), times_out)
        assert report.results[0].failure == FailureReason.UNEXPECTED
        assert report.cancelled is False


class TestConcurrency:
    async def test_order_preserved_and_bounded(self, fake_session, sleep):
        durations = {"kw0": 0.03, "kw1": 0.01, "kw2": 0.02, "kw3": 0.0, "kw4": 0.01}
        in_flight = []
        peak = []

        async def item(session, target):
            in_flight.append(target.keyword)
            peak.append(len(in_flight))
            await asyncio.sleep(durations[target.keyword])
            in_flight.remove(target.keyword)
            return await _rank(session, target)

        orchestrator = BatchOrchestrator(fake_session, concurrency=2, inter_item_delay=0, sleep=sleep)
        report = await orchestrator.run_batch(_keywords(5), item)

        assert [r.keyword for r in report.results] == ["kw0", "kw1", "kw2", "kw3", "kw4"]
        assert max(peak) <= 2
        assert fake_session.launch_count == 1
        assert fake_session.release_count == 1


class TestScenarios:
    async def test_three_urls_one_timeout(self, fake_session, fake_browser, make_site, sample_html, sleep):
        fake_browser.sites.update({
            "https://a.example": make_site(html=sample_html),
            "https://b.example": make_site(timeout=True),
            "https://c.example": make_site(html="<html><head><title>C</title></head></html>"),
        })
        targets = [CompetitorURL(url=f"https://{x}.example") for x in "abc"]
        extractor = TargetExtractor(profile=ExtractionProfile(settle_ms=0))

        report = await BatchOrchestrator(fake_session, inter_item_delay=2.0, sleep=sleep).run_batch(
            targets, extractor.extract
        )

        assert [r.status for r in report.results] == [ResultStatus.OK, ResultStatus.FAILED, ResultStatus.OK]
        assert report.results[1].failure == FailureReason.NAVIGATION_TIMEOUT
        assert [r.target.url for r in report.results] == [t.url for t in targets]
        assert sleep.calls == [2.0, 2.0, 2.0]
        assert fake_browser.contexts_closed == 3
        assert fake_browser.close_count == 1

    async def test_seven_directories_two_unrecognised(
        self, fake_session, fake_browser, make_site, sample_business, sleep
    ):
        form = {'input[name="business_name"]', 'input[name="phone"]', 'button[type="submit"]'}
        fake_browser.sites.update({
            "https://biz.yelp.com": make_site(elements=form),
            "https://www.facebook.com/pages/create": make_site(elements=form),
            "https://www.yellowpages.com": make_site(elements=form),
            "https://www.angi.com/business-registration": make_site(elements=form),
            "https://www.bbb.org/us/add-business": make_site(elements=form),
            "https://foursquare.com": make_site(),
        })
        dispatcher = DirectoryDispatcher(SubmissionTimings(settle_ms=0, action_delay_ms=0, post_submit_ms=0))

        async def submit(session, directory):
            return await dispatcher.submit(session, directory, sample_business)

        report = await BatchOrchestrator(fake_session, sleep=sleep).run_batch(DEFAULT_DIRECTORIES, submit)

        assert [r.directory_name for r in report.results] == [d.name for d in DEFAULT_DIRECTORIES]
        statuses = [r.status for r in report.results]
        assert statuses[:6] == [SubmissionStatus.SUBMITTED] * 6
        assert statuses[6] == SubmissionStatus.FAILED
        assert report.results[5].confidence == Confidence.LOW
        assert report.results[6].failure == FailureReason.NAVIGATION_FAILED

        summary = summarize_submissions(report.results, sample_business)
        assert summary.total_directories == 7
        assert summary.total_submitted == 6
        assert summary.total_low_confidence == 1
        assert summary.total_failed == 1
        assert fake_browser.contexts_closed == 7
        assert fake_session.release_count == 1
