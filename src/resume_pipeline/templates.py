# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Catalog of resume designs.

Each design is one JSON file in template_data/ with slug, name, category,
description, sort_order, default_config, html and css. Dropping a new file
into the directory adds a design; no code changes are needed.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from resume_pipeline.errors import NotFoundError
from resume_pipeline.models import Template

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "template_data"

REQUIRED_KEYS = ("slug", "name", "html")


class TemplateCatalog:
    """Loads templates from disk once and serves them by slug."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = Path(template_dir) if template_dir else TEMPLATE_DIR
        self._cache: Dict[str, Template] = {}

    def _load(self) -> Dict[str, Template]:
        if self._cache:
            return self._cache

        for path in sorted(self.template_dir.glob("*.json")):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping unreadable template {path.name}: {e}")
                continue

            missing = [k for k in REQUIRED_KEYS if not data.get(k)]
            if missing:
                logger.warning(f"Skipping template {path.name}: missing {', '.join(missing)}")
                continue

            template = Template(
                slug=data["slug"],
                name=data["name"],
                html=data["html"],
                css=data.get("css", ""),
                category=data.get("category", "professional"),
                description=data.get("description", ""),
                sort_order=int(data.get("sort_order", 0)),
                default_config=dict(data.get("default_config") or {}),
            )
            self._cache[template.slug] = template

        logger.debug(f"Loaded {len(self._cache)} templates from {self.template_dir}")
        return self._cache

    def list(self) -> List[Template]:
        return sorted(self._load().values(), key=lambda t: (t.sort_order, t.slug))

    def get(self, slug: str) -> Optional[Template]:
        return self._load().get(slug)

    def require(self, slug: str) -> Template:
        template = self.get(slug)
        if template is None:
            raise NotFoundError(f"Template not found: {slug}")
        return template

    def clear_cache(self):
        self._cache.clear()
