"""
In-memory view of the site_settings table.

The store loads every row into a key -> value mapping and, when subscribed,
reloads the whole set on any change. Theme and meta output are pure functions
of that mapping.
"""
import asyncio
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Set

from supabase import AsyncClient

from app.config import settings as app_settings
from app.modules.site_settings.schemas import MetaTags

logger = logging.getLogger(__name__)

DEFAULT_TITLE = app_settings.site_name
DEFAULT_DESCRIPTION = (
    f"{app_settings.site_name} organizes epic Minecraft events. Survival Games, "
    "custom events and unique experiences for the community."
)
DEFAULT_OG_IMAGE = (
    "https://storage.googleapis.com/gpt-engineer-file-uploads/iV48OAp7K1XXXFmI95rrhCiBxlJ3/"
    "social-images/social-1763905044505-IMG_0962.jpeg"
)

# Keys the admin panel edits, with the setting_type the seed script writes
KNOWN_SETTINGS = {
    "primary_color": "color",
    "secondary_color": "color",
    "hero_video": "video",
    "logo_url": "image",
    "og_title": "text",
    "og_description": "text",
    "og_image": "image",
}


def settings_map(rows: Optional[Iterable[Dict[str, Any]]]) -> Dict[str, str]:
    return {row["setting_key"]: row["setting_value"] for row in rows or []}


def render_theme(settings: Mapping[str, str]) -> Dict[str, str]:
    """CSS custom properties for the configured colors; unset colors keep the stylesheet values"""
    theme = {}
    primary = settings.get("primary_color")
    if primary:
        theme["--primary"] = primary
        theme["--accent"] = primary
        theme["--ring"] = primary
    secondary = settings.get("secondary_color")
    if secondary:
        theme["--secondary"] = secondary
    return theme


def render_meta_tags(settings: Mapping[str, str]) -> MetaTags:
    title = settings.get("og_title") or DEFAULT_TITLE
    description = settings.get("og_description") or DEFAULT_DESCRIPTION
    image = settings.get("og_image") or DEFAULT_OG_IMAGE
    return MetaTags(
        title=title,
        description=description,
        og_title=title,
        og_description=description,
        og_image=image,
        twitter_title=title,
        twitter_description=description,
        twitter_image=image,
    )


class SiteSettingsStore:
    def __init__(self, client: AsyncClient):
        self.client = client
        self.settings: Dict[str, str] = {}
        self.loaded = False
        self._channel = None
        self._tasks: Set[asyncio.Task] = set()

    async def load(self) -> Dict[str, str]:
        result = await self.client.table("site_settings").select("*").execute()
        self.settings = settings_map(result.data)
        self.loaded = True
        logger.debug(f"Loaded {len(self.settings)} site settings")
        return self.settings

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.settings.get(key) or default

    def snapshot(self) -> Dict[str, str]:
        return dict(self.settings)

    async def _reload(self):
        try:
            await self.load()
        except Exception as e:
            logger.error(f"Error reloading site settings: {e}")

    def _handle_change(self, payload):
        task = asyncio.ensure_future(self._reload())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def start(self):
        await self.load()
        self._channel = self.client.channel("site-settings-changes")
        self._channel.on_postgres_changes(
            event="*",
            schema="public",
            table="site_settings",
            callback=self._handle_change,
        )
        await self._channel.subscribe()
        logger.info("Subscribed to site settings changes")

    async def stop(self):
        if self._channel is not None:
            await self.client.remove_channel(self._channel)
            self._channel = None
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
