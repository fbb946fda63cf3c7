"""Supplier routes (admin only)."""

from fastapi import APIRouter, Depends, status

from app.auth.deps import get_store, require_admin
from app.schemas.product import ProductOut
from app.schemas.supplier import (
    SupplierCreate,
    SupplierOut,
    SupplierRegistrationOut,
    SupplierUpdate,
)
from app.services import suppliers
from app.services.catalog_store import CatalogStore

router = APIRouter()


@router.post("", response_model=SupplierRegistrationOut, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    body: SupplierCreate,
    _admin: dict = Depends(require_admin),
    store: CatalogStore = Depends(get_store),
):
    """Register a supplier delivery; the product's stock grows by `stock`."""
    registration = await suppliers.register_supplier(store, body)
    return SupplierRegistrationOut(
        message="Supplier added successfully and product stock updated",
        supplier=SupplierOut.model_validate(registration.supplier),
        updated_product=ProductOut.model_validate(registration.product),
    )


@router.get("", response_model=list[SupplierOut])
async def list_suppliers(
    _admin: dict = Depends(require_admin),
    store: CatalogStore = Depends(get_store),
):
    found = await suppliers.list_suppliers(store)
    return [SupplierOut.model_validate(s) for s in found]


@router.put("/{supplier_id}", response_model=SupplierOut)
async def update_supplier(
    supplier_id: str,
    body: SupplierUpdate,
    _admin: dict = Depends(require_admin),
    store: CatalogStore = Depends(get_store),
):
    supplier = await suppliers.update_supplier(store, supplier_id, body)
    return SupplierOut.model_validate(supplier)


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_supplier(
    supplier_id: str,
    _admin: dict = Depends(require_admin),
    store: CatalogStore = Depends(get_store),
):
    await suppliers.delete_supplier(store, supplier_id)
