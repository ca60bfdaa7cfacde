import pytest
from fastapi.testclient import TestClient

from backend.tests.utils import write_json_lesson


@pytest.fixture()
def lesson_dir(tmp_path):
    root = tmp_path / "lessons"
    root.mkdir()
    return root


@pytest.fixture()
def store(lesson_dir):
    from backend.app.content import ContentStore

    return ContentStore(lesson_dir)


@pytest.fixture()
def app(store):
    from backend.app import main as main_module

    main_module.app.dependency_overrides[main_module.get_store] = lambda: store
    yield main_module.app
    main_module.app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    with TestClient(app, base_url="https://testserver") as test_client:
        yield test_client


@pytest.fixture()
def seeded(lesson_dir):
    write_json_lesson(lesson_dir, 2, "A")
    write_json_lesson(lesson_dir, 1, "B")
    write_json_lesson(lesson_dir, 3, "C")
    return lesson_dir
