import requests

from core.config import settings

_session = requests.Session()


def api_get(path, **kwargs):
    return _session.get(f"{settings.API_BASE}{path}", **kwargs)

def api_post(path, **kwargs):
    return _session.post(f"{settings.API_BASE}{path}", **kwargs)

def api_patch(path, **kwargs):
    return _session.patch(f"{settings.API_BASE}{path}", **kwargs)

def api_delete(path, **kwargs):
    return _session.delete(f"{settings.API_BASE}{path}", **kwargs)

def api_put(path, **kwargs):
    return _session.put(f"{settings.API_BASE}{path}", **kwargs)
