from app.models.batch_job import BatchJob
from app.models.brand_seed import BrandSeed
from app.models.fashion_model import FashionModel
from app.models.garment import Garment
from app.models.generated_image import GeneratedImage

__all__ = ["BatchJob", "BrandSeed", "FashionModel", "Garment", "GeneratedImage"]
