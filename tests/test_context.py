from datetime import datetime, timedelta, timezone

from rulebook.validation import Cancelled, Context, DeadlineExceeded


def test_background_is_never_done():
    ctx = Context.background()
    assert ctx.err() is None
    assert not ctx.done()
    assert ctx.deadline() is None


def test_values_are_looked_up_along_the_chain():
    root = Context.background().with_value("user", "alice")
    child = root.with_value("request", 7)

    assert child.value("user") == "alice"
    assert child.value("request") == 7
    assert root.value("request") is None
    assert child.value("missing", "default") == "default"
    assert child.with_value("user", "bob").value("user") == "bob"


def test_cancel_flows_to_descendants_only():
    parent, cancel = Context.background().with_cancel()
    child = parent.with_value("k", "v")
    sibling = Context.background()

    cancel()
    cancel()
    assert isinstance(parent.err(), Cancelled)
    assert isinstance(child.err(), Cancelled)
    assert str(child.err()) == "context canceled"
    assert sibling.err() is None


def test_timeout():
    ctx, cancel = Context.background().with_timeout(-0.001)
    assert isinstance(ctx.err(), DeadlineExceeded)
    assert str(ctx.err()) == "context deadline exceeded"

    ctx, cancel = Context.background().with_timeout(60)
    assert not ctx.done()
    cancel()
    assert isinstance(ctx.err(), Cancelled)


def test_earliest_deadline_wins():
    outer, _ = Context.background().with_timeout(60)
    inner, _ = outer.with_timeout(3600)
    assert inner.deadline() == outer.deadline()


def test_with_deadline_accepts_aware_and_naive_datetimes():
    past, _ = Context.background().with_deadline(datetime.now(timezone.utc) - timedelta(seconds=1))
    assert past.done()

    future, _ = Context.background().with_deadline(datetime.now() + timedelta(hours=1))
    assert not future.done()
