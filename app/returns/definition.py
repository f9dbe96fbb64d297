from app.exchange.derived import return_values
from app.exchange.entity import CellFormat, EntityDefinition, ExportColumn
from app.exchange.fields import Coercion, FieldSpec, ForeignKeyRef

RETURNS = EntityDefinition(
    name="returns",
    table="returns",
    sheet_title="Retornados",
    file_stem="retornados",
    fields=(
        FieldSpec("client_id", "ID Cliente", Coercion.integer, required=True),
        FieldSpec("toner_model", "Modelo", required=True),
        FieldSpec("returned_weight", "Peso Retornado", Coercion.number, default=0.0),
        FieldSpec("unit_name", "Unidade", required=True),
        FieldSpec("destination", "Destino", required=True),
    ),
    references=(
        ForeignKeyRef(field="toner_id", source="toner_model", table="toners", natural_key="model"),
        ForeignKeyRef(field="unit_id", source="unit_name", table="units", natural_key="name"),
    ),
    columns=(
        ExportColumn("ID Cliente", "client_id"),
        ExportColumn("Modelo", "toner.model"),
        ExportColumn("Peso Cheio", "toner.full_weight"),
        ExportColumn("Impressoras Compatíveis", "toner.compatible_printers"),
        ExportColumn("Cor", "toner.color"),
        ExportColumn("Área ISO", "toner.iso_area", CellFormat.percent),
        ExportColumn("Capacidade", "toner.sheet_capacity"),
        ExportColumn("Tipo", "toner.kind"),
        ExportColumn("Peso Retornado", "returned_weight"),
        ExportColumn("Unidade", "unit.name"),
        ExportColumn("Destino", "destination"),
        ExportColumn("Valor Recuperado", "recovered_value", CellFormat.currency),
        ExportColumn("Data", "created_at", CellFormat.timestamp),
    ),
    derive=return_values,
)


def export_filename(start_date: str | None, end_date: str | None) -> str:
    if start_date and end_date:
        return f"{RETURNS.file_stem}_{start_date}_a_{end_date}.xlsx"
    return RETURNS.filename
