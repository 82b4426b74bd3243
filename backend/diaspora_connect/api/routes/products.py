"""Store Products: public catalog and staff management (including image upload)."""

from fastapi import APIRouter, Depends, File, UploadFile, status

from diaspora_connect.api.dependencies import repository, require_staff
from diaspora_connect.core.errors import InvalidRequestError
from diaspora_connect.infrastructure.storage import StorageClient, get_storage
from diaspora_connect.repositories.content import ProductRepository
from diaspora_connect.schemas.content import ProductCreate, ProductUpdate
from diaspora_connect.services.media_service import replace_image

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("")
def list_products(
    products: ProductRepository = Depends(repository(ProductRepository)),
):
    return {"products": products.list_active()}


@router.get("/admin/all")
def list_all_products(
    _staff: dict = Depends(require_staff),
    products: ProductRepository = Depends(repository(ProductRepository)),
):
    return {"products": products.list_all()}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    _staff: dict = Depends(require_staff),
    products: ProductRepository = Depends(repository(ProductRepository)),
):
    return products.create(body.to_document())


@router.patch("/{product_id}")
def update_product(
    product_id: str,
    body: ProductUpdate,
    _staff: dict = Depends(require_staff),
    products: ProductRepository = Depends(repository(ProductRepository)),
):
    fields = body.to_document(exclude_unset=True)
    if not fields:
        raise InvalidRequestError("No product fields to update")
    products.update(product_id, fields)
    return products.require(product_id)


@router.post("/{product_id}/image")
def upload_product_image(
    product_id: str,
    file: UploadFile = File(...),
    _staff: dict = Depends(require_staff),
    storage: StorageClient = Depends(get_storage),
    products: ProductRepository = Depends(repository(ProductRepository)),
):
    url = replace_image(
        storage, products, product_id,
        folder="products",
        data=file.file.read(),
        filename=file.filename or "image",
        content_type=file.content_type,
    )
    return {"imageUrl": url}
