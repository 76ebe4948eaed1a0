import asyncio
import logging
from typing import Dict, List

from pydantic import ValidationError

from . import search_service
from .schemas import FAVORITE_CATEGORIES, FavoritesSet
from .storage import KeyValueStore, read_json, write_json

LOGGER = logging.getLogger("curalink.favorites")

FAVORITES_KEY = "favorites"


class FavoritesManager:
    """Favorite ids per category, kept in the preference store.

    Every toggle rewrites the whole structure, so concurrent writers sharing a
    store lose updates (last write wins).
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_favorites(self) -> FavoritesSet:
        raw = read_json(self.store, FAVORITES_KEY)
        if not raw:
            return FavoritesSet()
        try:
            return FavoritesSet.model_validate(raw)
        except ValidationError:
            LOGGER.warning("Stored favorites are malformed; starting from an empty set")
            return FavoritesSet()

    def toggle_favorite(self, category: str, item_id: str) -> FavoritesSet:
        favorites = self.get_favorites()
        ids = favorites.ids(category)
        if item_id in ids:
            ids.remove(item_id)
        else:
            ids.append(item_id)
        write_json(self.store, FAVORITES_KEY, favorites.model_dump())
        return favorites

    def is_favorite(self, category: str, item_id: str) -> bool:
        return item_id in self.get_favorites().ids(category)

    def clear(self) -> None:
        self.store.remove(FAVORITES_KEY)

    async def load_favorite_entities(self) -> Dict[str, List]:
        """Resolve stored ids to entities, in catalogue order; unknown ids are dropped."""
        favorites = self.get_favorites()
        researchers, publications, trials = await asyncio.gather(
            search_service.search_researchers(""),
            search_service.search_publications(""),
            search_service.search_clinical_trials(""),
        )
        catalogues = {"researchers": researchers, "publications": publications, "trials": trials}
        return {
            category: [entity for entity in catalogues[category] if entity.id in favorites.ids(category)]
            for category in FAVORITE_CATEGORIES
        }
