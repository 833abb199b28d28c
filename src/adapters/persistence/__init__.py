from .dynamodb_route_geometry_cache import DynamoDbRouteGeometryCache
from .local_file_cache import LocalFileCache
from .memory_cache import InMemoryFileCache, InMemoryRouteGeometryCache
from .s3_file_cache import S3FileCache

__all__ = [
    "DynamoDbRouteGeometryCache",
    "InMemoryFileCache",
    "InMemoryRouteGeometryCache",
    "LocalFileCache",
    "S3FileCache",
]
