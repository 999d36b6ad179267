"""Tenant resolution for API requests"""

from fastapi import Header


def get_tenant_id(x_tenant_id: int = Header(..., alias="X-Tenant-ID")) -> int:
    """Every job query is scoped to the tenant named in the X-Tenant-ID header"""
    return x_tenant_id
