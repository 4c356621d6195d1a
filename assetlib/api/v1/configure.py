"""
Taxonomy endpoint used by the editor to populate its filters.
"""

from typing import Literal

from fastapi import APIRouter, Query

from assetlib.models.asset import CATEGORY_MAX, LICENSES, Asset, CategoryType
from assetlib.schemas.taxonomy import ConfigureResponse

router = APIRouter()

_CATEGORY_TYPES = {
    "addon": CategoryType.ADDONS,
    "project": CategoryType.PROJECTS,
}


@router.get("/configure", response_model=ConfigureResponse)
async def configure(
    type: Literal["addon", "project", "any"] = Query(
        default="any",
        description="Only list categories of this type",
    ),
):
    """List categories (optionally of one type) and licenses."""
    wanted = _CATEGORY_TYPES.get(type)

    categories = []
    for category_id in range(CATEGORY_MAX):
        category_type = Asset.get_category_type(category_id)
        if wanted is not None and category_type != wanted:
            continue
        categories.append({
            "id": category_id,
            "name": Asset.get_category_name(category_id),
            "icon": Asset.get_category_icon(category_id),
            "type": int(category_type),
        })

    licenses = [{"id": spdx_id, "name": name} for spdx_id, name in LICENSES.items()]

    return {"categories": categories, "licenses": licenses}
