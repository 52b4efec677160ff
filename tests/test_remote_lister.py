"""Unit tests for budgeted remote listing traversal."""

import pytest

from common.types import RemoteObjectRecord
from conftest import FakeTransport, make_objects
from insights.exceptions import InvalidCredentialError, RemoteTransportError
from insights.remote_lister import ObjectBudget, RemoteLister


class Collector:
    """Fold callback recording every batch it receives."""

    def __init__(self):
        self.batches = []

    def __call__(self, bucket, objects):
        self.batches.append((bucket, list(objects)))

    @property
    def objects(self):
        return [obj for _, batch in self.batches for obj in batch]

    def count_for(self, bucket):
        return sum(len(batch) for name, batch in self.batches if name == bucket)


class TestObjectBudget:

    def test_reserve_grants_up_to_ceiling(self):
        budget = ObjectBudget(25)

        assert budget.reserve(10) == 10
        assert budget.reserve(10) == 10
        assert budget.reserve(10) == 5
        assert budget.reserve(10) == 0
        assert budget.used == 25
        assert budget.exhausted

    def test_zero_ceiling_is_immediately_exhausted(self):
        budget = ObjectBudget(0)
        assert budget.exhausted
        assert budget.reserve(1) == 0

    def test_negative_ceiling_rejected(self):
        with pytest.raises(ValueError):
            ObjectBudget(-1)


class TestIterPages:

    @pytest.mark.asyncio
    async def test_pages_follow_continuation_tokens(self, credential):
        transport = FakeTransport({"photos": make_objects("p", 25)})
        lister = RemoteLister(transport, page_size=10)

        sizes = [len(page.objects) async for page in lister.iter_pages("photos", credential)]

        assert sizes == [10, 10, 5]
        assert transport.calls == [
            ("list_objects_page", "photos", None),
            ("list_objects_page", "photos", "10"),
            ("list_objects_page", "photos", "20"),
        ]

    @pytest.mark.asyncio
    async def test_stopping_early_fetches_no_more_pages(self, credential):
        transport = FakeTransport({"photos": make_objects("p", 50)})
        lister = RemoteLister(transport, page_size=10)

        async for page in lister.iter_pages("photos", credential):
            break

        assert transport.page_calls("photos") == 1

    @pytest.mark.asyncio
    async def test_prefix_filters_keys(self, credential):
        objects = make_objects("keep", 3) + make_objects("skip", 4)
        transport = FakeTransport({"mixed": objects})
        lister = RemoteLister(transport, page_size=10)

        keys = [obj.key async for page in lister.iter_pages("mixed", credential, prefix="keep/")
                for obj in page.objects]

        assert len(keys) == 3
        assert all(key.startswith("keep/") for key in keys)

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_wrapped(self, credential):
        class BrokenTransport(FakeTransport):
            def list_objects_page(self, *args):
                raise ConnectionResetError("peer reset")

        lister = RemoteLister(BrokenTransport({"photos": []}), page_size=10)

        with pytest.raises(RemoteTransportError) as exc_info:
            async for _ in lister.iter_pages("photos", credential):
                pass

        assert exc_info.value.bucket == "photos"


class TestTraverse:

    @pytest.mark.asyncio
    async def test_folds_every_object_under_ceiling(self, credential):
        transport = FakeTransport({
            "photos": make_objects("p", 25, size=2),
            "backups": make_objects("b", 7, size=3),
        })
        lister = RemoteLister(transport, page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(100), fold, "alice")

        assert not result.partial
        assert not result.budget_exhausted
        assert result.objects_examined == 32
        assert sorted(result.buckets_scanned) == ["backups", "photos"]
        assert fold.count_for("photos") == 25
        assert fold.count_for("backups") == 7

    @pytest.mark.asyncio
    async def test_ceiling_mid_page_folds_exactly_ceiling(self, credential):
        transport = FakeTransport({"photos": make_objects("p", 25)})
        lister = RemoteLister(transport, page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(15), fold)

        assert len(fold.objects) == 15
        assert result.objects_examined == 15
        assert result.partial
        assert result.budget_exhausted
        assert transport.page_calls() == 2

    @pytest.mark.asyncio
    async def test_ceiling_equal_to_total_is_not_partial(self, credential):
        transport = FakeTransport({"photos": make_objects("p", 20)})
        lister = RemoteLister(transport, page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(20), fold)

        assert len(fold.objects) == 20
        assert result.budget_exhausted
        assert not result.partial

    @pytest.mark.asyncio
    async def test_ceiling_on_page_boundary_with_more_pages_is_partial(self, credential):
        transport = FakeTransport({"photos": make_objects("p", 30)})
        lister = RemoteLister(transport, page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(20), fold)

        assert len(fold.objects) == 20
        assert result.partial
        assert transport.page_calls() == 2

    @pytest.mark.asyncio
    async def test_exhaustion_skips_remaining_buckets(self, credential):
        transport = FakeTransport({
            "first": make_objects("f", 20),
            "second": make_objects("s", 5),
        })
        lister = RemoteLister(transport, page_size=10, bucket_concurrency=1)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(20), fold)

        assert result.partial
        assert result.skipped_buckets == ["second"]
        assert transport.page_calls("second") == 0
        assert fold.count_for("second") == 0

    @pytest.mark.asyncio
    async def test_failing_bucket_keeps_folded_pages_and_continues(self, credential):
        transport = FakeTransport({
            "flaky": make_objects("f", 25),
            "healthy": make_objects("h", 4),
        })
        transport.fail_on_page["flaky"] = 1
        lister = RemoteLister(transport, page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(100), fold)

        assert result.partial
        assert result.failed_buckets == ["flaky"]
        assert result.buckets_scanned == ["healthy"]
        assert fold.count_for("flaky") == 10
        assert fold.count_for("healthy") == 4

    @pytest.mark.asyncio
    async def test_first_page_failure_folds_nothing(self, credential):
        transport = FakeTransport({"flaky": make_objects("f", 5)})
        transport.fail_on_page["flaky"] = 0
        lister = RemoteLister(transport, page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(100), fold)

        assert result.partial
        assert fold.objects == []
        assert result.objects_examined == 0

    @pytest.mark.asyncio
    async def test_credential_rejected_mid_run_only_fails_that_bucket(self, credential):
        class ExpiringTransport(FakeTransport):
            def list_objects_page(self, bucket, *args):
                if bucket == "expired":
                    raise InvalidCredentialError("session token expired")
                return super().list_objects_page(bucket, *args)

        transport = ExpiringTransport({
            "expired": make_objects("e", 3),
            "healthy": [RemoteObjectRecord(key="notes/y.txt", size=7)],
        })
        lister = RemoteLister(transport, page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(100), fold)

        assert result.partial
        assert result.failed_buckets == ["expired"]
        assert [obj.key for obj in fold.objects] == ["notes/y.txt"]

    @pytest.mark.asyncio
    async def test_credential_rejected_on_bucket_listing_is_partial(self, credential):
        class RejectingTransport(FakeTransport):
            def list_buckets(self, credential):
                raise InvalidCredentialError("session token expired")

        lister = RemoteLister(RejectingTransport({"photos": make_objects("p", 2)}), page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(100), fold)

        assert result.partial
        assert fold.objects == []

    @pytest.mark.asyncio
    async def test_bucket_listing_failure_is_partial(self, credential):
        transport = FakeTransport({"photos": make_objects("p", 5)})
        transport.fail_list_buckets = True
        lister = RemoteLister(transport, page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(100), fold)

        assert result.partial
        assert fold.objects == []
        assert transport.page_calls() == 0

    @pytest.mark.asyncio
    async def test_no_buckets(self, credential):
        lister = RemoteLister(FakeTransport(), page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(100), fold)

        assert not result.partial
        assert result.objects_examined == 0

    @pytest.mark.asyncio
    async def test_concurrent_buckets_never_exceed_ceiling(self, credential):
        transport = FakeTransport({
            f"bucket-{i}": make_objects(f"b{i}", 30) for i in range(6)
        })
        lister = RemoteLister(transport, page_size=7, bucket_concurrency=4)
        fold = Collector()
        budget = ObjectBudget(100)

        result = await lister.traverse(credential, budget, fold)

        assert len(fold.objects) == 100
        assert budget.used == 100
        assert result.partial
        assert result.budget_exhausted

    @pytest.mark.asyncio
    async def test_zero_size_objects_still_count_toward_ceiling(self, credential):
        objects = [RemoteObjectRecord(key=f"dir-{i}/", size=0) for i in range(12)]
        transport = FakeTransport({"markers": objects})
        lister = RemoteLister(transport, page_size=10)
        fold = Collector()

        result = await lister.traverse(credential, ObjectBudget(5), fold)

        assert len(fold.objects) == 5
        assert result.partial
