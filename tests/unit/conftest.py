from __future__ import annotations

import pytest

from src.app.domain.models import Cookbook, Profile
from src.app.services.cookbook_copy import CookbookDuplicationEngine
from src.app.services.cookbook_service import CookbookService
from src.app.services.recipe_service import RecipeService
from src.app.services.share_service import ShareTokenService
from tests.unit.stubs import (
    OTHER_ID,
    OWNER_ID,
    CookbookRepositoryStub,
    FakeClock,
    ProfileRepositoryStub,
    RecipeRepositoryStub,
    ShareTokenRepositoryStub,
    make_content,
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cookbooks() -> CookbookRepositoryStub:
    return CookbookRepositoryStub()


@pytest.fixture
def recipes() -> RecipeRepositoryStub:
    return RecipeRepositoryStub()


@pytest.fixture
def shares() -> ShareTokenRepositoryStub:
    return ShareTokenRepositoryStub()


@pytest.fixture
def profiles() -> ProfileRepositoryStub:
    repo = ProfileRepositoryStub()
    repo.rows[OWNER_ID] = Profile(id=OWNER_ID, name="Alice", email="alice@example.com")
    repo.rows[OTHER_ID] = Profile(id=OTHER_ID, name="Bob", email="bob@example.com")
    return repo


@pytest.fixture
def copier(
    cookbooks: CookbookRepositoryStub,
    recipes: RecipeRepositoryStub,
    profiles: ProfileRepositoryStub,
    clock: FakeClock,
) -> CookbookDuplicationEngine:
    return CookbookDuplicationEngine(cookbooks, recipes, profiles, clock=clock)


@pytest.fixture
def cookbook_service(
    cookbooks: CookbookRepositoryStub,
    recipes: RecipeRepositoryStub,
    shares: ShareTokenRepositoryStub,
    copier: CookbookDuplicationEngine,
    clock: FakeClock,
) -> CookbookService:
    return CookbookService(cookbooks, recipes, shares, copier, clock=clock)


@pytest.fixture
def recipe_service(
    cookbooks: CookbookRepositoryStub,
    recipes: RecipeRepositoryStub,
    clock: FakeClock,
) -> RecipeService:
    return RecipeService(cookbooks, recipes, clock=clock)


@pytest.fixture
def share_service(
    shares: ShareTokenRepositoryStub,
    cookbooks: CookbookRepositoryStub,
    recipes: RecipeRepositoryStub,
    profiles: ProfileRepositoryStub,
    copier: CookbookDuplicationEngine,
    clock: FakeClock,
) -> ShareTokenService:
    return ShareTokenService(shares, cookbooks, recipes, profiles, copier, clock=clock)


@pytest.fixture
def holiday_cookbook(
    cookbook_service: CookbookService,
    recipe_service: RecipeService,
) -> Cookbook:
    cookbook = cookbook_service.create(OWNER_ID, "Holiday Recipes", "Family favourites")
    for title in ("Roast Turkey", "Stuffing", "Pumpkin Pie"):
        recipe_service.create(OWNER_ID, cookbook.id, make_content(title))
    return cookbook
