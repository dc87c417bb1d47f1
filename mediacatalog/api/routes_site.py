from fastapi import APIRouter, Depends
from fastapi.responses import Response

from mediacatalog.api.dependencies import get_reader
from mediacatalog.services.reader import CatalogReader

router = APIRouter()


@router.get("/sitemap.xml")
async def sitemap(reader: CatalogReader = Depends(get_reader)):
    return Response(content=await reader.sitemap_xml(), media_type="application/xml")
