"""
예제 API 서버 테스트

테스트 항목:
1. 설정 파일 로드
2. 커스텀 라우트 (/items/custom-route)
3. 목록 after 미들웨어 (modifiedProp 추가)
4. 단건 / 수정 / 삭제 after 미들웨어
5. resource_modifier (요청 범위 컬렉션)

실행: python -m pytest test/example_test.py -v
"""

import asyncio
import logging
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

sys.path.insert(0, str(Path(__file__).parent.parent))

from database import new_id
from example.main import CONFIG_DIR, create_app, load_config
from example.routes import MODIFIED_PROP

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@pytest.fixture
def app_config(tmp_path):
    config = load_config(CONFIG_DIR)
    config['database'] = {'name': 'test', 'path': str(tmp_path / 'example.db')}
    return config


@pytest_asyncio.fixture
async def client(app_config):
    """예제 앱 클라이언트 (lifespan 대신 직접 DB 초기화)"""
    app = create_app(app_config)
    await app.state.db.initialize()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    await app.state.db.close()


class TestConfig:
    """설정 로드 테스트"""

    def test_load_config(self):
        config = load_config(CONFIG_DIR)
        assert config['app']['base_path'] == '/items'
        assert 'X-Total-Count' in config['app']['cors']['expose_headers']
        assert 'path' in config['database']


class TestItemRoutes:
    """Item 리소스 라우트 테스트"""

    @pytest.mark.asyncio
    async def test_custom_route(self, client):
        response = await client.get("/items/custom-route")
        assert response.status_code == 200
        assert response.text == "This is a custom route"
        logger.info("Custom route test passed")

    @pytest.mark.asyncio
    async def test_list_is_modified(self, client):
        await client.post("/items/", json={"name": "widget", "color": "red"})
        await client.post("/items/", json={"name": "gadget", "color": "blue"})

        response = await client.get("/items/all?_sort=name&_order=ASC")

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        records = response.json()
        assert [r["name"] for r in records] == ["gadget", "widget"]
        assert all(r["modifiedProp"] == MODIFIED_PROP for r in records)
        logger.info("Modified list test passed")

    @pytest.mark.asyncio
    async def test_item_lifecycle(self, client):
        created = (await client.post("/items/", json={"name": "widget", "extra": 1})).json()
        assert "extra" not in created

        single = await client.get(f"/items/single/{created['id']}")
        assert single.json() == created

        updated = await client.put(f"/items/{created['id']}", json={"color": "green"})
        assert updated.json()["color"] == "green"

        deleted = await client.delete(f"/items/{created['id']}")
        assert deleted.json()["deleted_count"] == 1

        missing = await client.get(f"/items/single/{created['id']}")
        assert missing.status_code == 200
        assert missing.content == b''

    @pytest.mark.asyncio
    async def test_concurrent_partial_updates(self, client):
        """동시 PUT은 각자 보낸 필드만 변경"""
        created = (await client.post("/items/", json={"name": "a", "color": "red"})).json()

        await asyncio.gather(
            client.put(f"/items/{created['id']}", json={"name": "b"}),
            client.put(f"/items/{created['id']}", json={"color": "blue"}),
        )

        stored = (await client.get(f"/items/single/{created['id']}")).json()
        assert (stored["name"], stored["color"]) == ("b", "blue")

    @pytest.mark.asyncio
    async def test_missing_item_update(self, client):
        response = await client.put(f"/items/{new_id()}", json={"color": "green"})
        assert response.status_code == 200
        assert response.content == b''

    @pytest.mark.asyncio
    async def test_invalid_id(self, client):
        response = await client.delete("/items/123")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_cors_exposes_total_count(self, client):
        response = await client.get("/items/all", headers={"Origin": "http://example.com"})
        assert "x-total-count" in response.headers["access-control-expose-headers"].lower()


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
