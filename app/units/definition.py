from app.exchange.entity import CellFormat, EntityDefinition, ExportColumn
from app.exchange.fields import FieldSpec
from app.exchange.guard import DuplicatePolicy

UNITS = EntityDefinition(
    name="units",
    table="units",
    sheet_title="Unidades",
    file_stem="unidades",
    fields=(FieldSpec("name", "Unidade", required=True),),
    columns=(
        ExportColumn("Unidade", "name"),
        ExportColumn("Data de Cadastro", "created_at", CellFormat.timestamp),
    ),
    duplicate_policy=DuplicatePolicy.reject_natural_key,
    natural_key="name",
)
