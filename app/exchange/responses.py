from fastapi.responses import Response

from app.exchange.export import XLSX_MEDIA_TYPE


def workbook_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
