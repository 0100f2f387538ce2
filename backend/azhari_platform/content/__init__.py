from azhari_platform.content.upsert import (
    ContentService,
    CreateContent,
    EditContent,
    bucket_for_type,
    build_object_path,
    storage_path_from_public_url,
)

__all__ = [
    "ContentService",
    "CreateContent",
    "EditContent",
    "bucket_for_type",
    "build_object_path",
    "storage_path_from_public_url",
]
