import pytest

from finance_tracker.manager import CategorizerService
from finance_tracker.storage.categories import CategoryRepository


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def repository() -> CategoryRepository:
    return CategoryRepository(data_path=None)


@pytest.fixture
def service(repository: CategoryRepository) -> CategorizerService:
    service = CategorizerService(repository=repository)
    service.initialize_default_categories()
    service.train()
    return service
