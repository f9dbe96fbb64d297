from app.exchange.derived import tco_values
from app.exchange.entity import CellFormat, EntityDefinition, ExportColumn
from app.exchange.fields import Coercion, FieldSpec
from app.exchange.line_items import LineItemSpec

OPERATING_COSTS = LineItemSpec(
    name="operating_costs",
    table="tco_operating_costs",
    parent_field="tco_id",
    title_label="Custo Operacional {index} - Título",
    value_label="Custo Operacional {index} - Valor",
)
INDIRECT_COSTS = LineItemSpec(
    name="indirect_costs",
    table="tco_indirect_costs",
    parent_field="tco_id",
    title_label="Custo Indireto {index} - Título",
    value_label="Custo Indireto {index} - Valor",
)

TCOS = EntityDefinition(
    name="tco",
    table="tcos",
    sheet_title="TCOs",
    file_stem="tcos",
    fields=(
        FieldSpec("model", "Modelo", default=""),
        FieldSpec("manufacturer", "Fabricante", default=""),
        FieldSpec("kind", "Tipo", default=""),
        FieldSpec("printer_price", "Preço Impressora", Coercion.number, default=0.0),
        FieldSpec("pis", "PIS", Coercion.number, default=0.0),
        FieldSpec("ipi", "IPI", Coercion.number, default=0.0),
        FieldSpec("icms", "ICMS", Coercion.number, default=0.0),
        FieldSpec("cofins", "COFINS", Coercion.number, default=0.0),
        FieldSpec("accessories", "Acessórios", Coercion.number, default=0.0),
        FieldSpec("notes", "Observação", default=""),
    ),
    columns=(
        ExportColumn("Modelo", "model"),
        ExportColumn("Fabricante", "manufacturer"),
        ExportColumn("Tipo", "kind"),
        ExportColumn("Preço Impressora", "printer_price", CellFormat.currency),
        ExportColumn("PIS", "pis", CellFormat.currency),
        ExportColumn("IPI", "ipi", CellFormat.currency),
        ExportColumn("ICMS", "icms", CellFormat.currency),
        ExportColumn("COFINS", "cofins", CellFormat.currency),
        ExportColumn("Acessórios", "accessories", CellFormat.currency),
        ExportColumn("Total Aquisição", "acquisition_total", CellFormat.currency),
        ExportColumn("Observação", "notes"),
        ExportColumn("Data Cadastro", "created_at", CellFormat.timestamp),
    ),
    derive=tco_values,
    line_items=(OPERATING_COSTS, INDIRECT_COSTS),
)
