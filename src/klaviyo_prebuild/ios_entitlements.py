"""
签名权限（`entitlements`）修补：把共享分组标识写入 App Groups 数组。
"""

from __future__ import annotations

from .ios_plist import app_group_identifier, require_bundle_id
from .log import log_debug
from .plist_edit import array_upsert_string

APP_GROUPS_KEY = "com.apple.security.application-groups"


def patch_entitlements(ent: dict, bundle_id: str | None) -> dict:
    """原地 upsert 共享分组标识；已有条目的内容与顺序保持不变。"""
    group = app_group_identifier(require_bundle_id(bundle_id))
    if array_upsert_string(ent, APP_GROUPS_KEY, group):
        log_debug(f"Added app group {group} to entitlements")
    return ent
