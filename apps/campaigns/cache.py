from django.core.cache import cache

READ_TIMEOUT = 300
VERSION_KEY = "campaigns:reads:version"


def _version():
    version = cache.get(VERSION_KEY)
    if version is None:
        cache.add(VERSION_KEY, 1, None)
        version = cache.get(VERSION_KEY, 1)
    return version


def campaign_detail_key(campaign_id):
    return f"campaigns:v{_version()}:detail:{campaign_id}"


def campaign_list_key():
    return f"campaigns:v{_version()}:list"


def invalidate_campaign_reads(campaign_id):
    cache.delete_many([campaign_detail_key(campaign_id), campaign_list_key()])


def invalidate_all_campaign_reads():
    """Drop every cached campaign payload, e.g. after an ad account limit changes."""
    try:
        cache.incr(VERSION_KEY)
    except ValueError:
        cache.set(VERSION_KEY, 2, None)
