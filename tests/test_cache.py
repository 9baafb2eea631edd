from unittest.mock import MagicMock, patch

from progress_tracker.infrastructure import cache
from progress_tracker.infrastructure.cache import COURSES_KEY, delete_cache, get_cache, get_redis, set_cache

@patch('progress_tracker.infrastructure.cache.get_redis')
def test_get_cache_hit(mock_redis):
    mock_client = MagicMock()
    mock_client.get.return_value = '[{"id": 1, "name": "Math", "color": null}]'
    mock_redis.return_value = mock_client

    assert get_cache(COURSES_KEY) == [{"id": 1, "name": "Math", "color": None}]
    mock_client.get.assert_called_once_with(COURSES_KEY)

@patch('progress_tracker.infrastructure.cache.get_redis')
def test_get_cache_miss(mock_redis):
    mock_client = MagicMock()
    mock_client.get.return_value = None
    mock_redis.return_value = mock_client

    assert get_cache(COURSES_KEY) is None

@patch('progress_tracker.infrastructure.cache.get_redis')
def test_get_cache_error_is_a_miss(mock_redis):
    mock_redis.side_effect = Exception("Redis error")
    assert get_cache(COURSES_KEY) is None

@patch('progress_tracker.infrastructure.cache.get_redis')
def test_set_cache(mock_redis):
    mock_client = MagicMock()
    mock_redis.return_value = mock_client

    assert set_cache(COURSES_KEY, [], ttl=60) is True
    mock_client.setex.assert_called_once_with(COURSES_KEY, 60, "[]")

@patch('progress_tracker.infrastructure.cache.get_redis')
def test_set_cache_error(mock_redis):
    mock_redis.side_effect = Exception("Redis error")
    assert set_cache(COURSES_KEY, []) is False

@patch('progress_tracker.infrastructure.cache.get_redis')
def test_delete_cache(mock_redis):
    mock_client = MagicMock()
    mock_redis.return_value = mock_client

    assert delete_cache(COURSES_KEY) is True
    mock_client.delete.assert_called_once_with(COURSES_KEY)

def test_cache_disabled_without_redis_url(monkeypatch):
    monkeypatch.setattr(cache.settings, "REDIS_URL", None)
    assert get_redis() is None
    assert get_cache(COURSES_KEY) is None
    assert set_cache(COURSES_KEY, []) is False

def test_course_listing_served_from_cache(client, admin_headers):
    cached = [{"id": 7, "name": "Cached", "color": None}]
    with patch('progress_tracker.interfaces.http.routers.admin.get_cache', return_value=cached):
        response = client.get("/api/admin/courses", headers=admin_headers)
    assert response.json() == cached

def test_course_writes_invalidate_cache(client, admin_headers):
    with patch('progress_tracker.interfaces.http.routers.admin.delete_cache') as mock_delete:
        client.post("/api/admin/courses", json={"name": "Math"}, headers=admin_headers)
    mock_delete.assert_called_once_with(COURSES_KEY)
