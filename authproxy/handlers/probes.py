import datetime
import kopf


@kopf.on.probe(id='now')
def get_current_timestamp(**kwargs):
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


@kopf.on.probe(id='trackedDeletions')
def get_tracked_deletions(memo: kopf.Memo, **kwargs):
    """Number of AuthProxyWorkload keys remembered by the deletion tracker."""
    tracker = getattr(memo, "tracker", None)
    return len(tracker) if tracker is not None else 0
