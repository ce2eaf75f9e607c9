from app.schemas.batch_job import (
    BatchJobConfiguration,
    BatchJobCreate,
    BatchJobRead,
    BulkDeleteRequest,
    ErrorLogEntry,
    JobDispatchResponse,
)
from app.schemas.brand_seed import BrandSeedCreate, BrandSeedRead
from app.schemas.fashion_model import FashionModelCreate, FashionModelRead
from app.schemas.garment import GarmentAnalysis, GarmentCreate, GarmentDetails, GarmentRead
from app.schemas.generated_image import GeneratedImageRead

__all__ = [
    "BatchJobConfiguration",
    "BatchJobCreate",
    "BatchJobRead",
    "BrandSeedCreate",
    "BrandSeedRead",
    "BulkDeleteRequest",
    "ErrorLogEntry",
    "FashionModelCreate",
    "FashionModelRead",
    "JobDispatchResponse",
    "GarmentAnalysis",
    "GarmentCreate",
    "GarmentDetails",
    "GarmentRead",
    "GeneratedImageRead",
]
