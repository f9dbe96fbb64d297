from app.exchange.derived import toner_values
from app.exchange.entity import CellFormat, EntityDefinition, ExportColumn
from app.exchange.fields import Coercion, FieldSpec

DEFAULT_COLOR = "Black"
DEFAULT_KIND = "Compatível"
DEFAULT_ISO_AREA = 0.05

TONERS = EntityDefinition(
    name="toners",
    table="toners",
    sheet_title="Toners",
    file_stem="toners",
    fields=(
        FieldSpec("model", "Modelo", required=True),
        FieldSpec("full_weight", "Peso Cheio (g)", Coercion.number, default=0.0),
        FieldSpec("empty_weight", "Peso Vazio (g)", Coercion.number, default=0.0),
        FieldSpec("compatible_printers", "Impressoras Compatíveis", default=""),
        FieldSpec("color", "Cor", Coercion.enum, default=DEFAULT_COLOR),
        FieldSpec("iso_area", "Área ISO", Coercion.percent, default=DEFAULT_ISO_AREA),
        FieldSpec("sheet_capacity", "Capacidade", Coercion.integer, default=0),
        FieldSpec("kind", "Tipo", Coercion.enum, default=DEFAULT_KIND),
        FieldSpec("price", "Preço", Coercion.number, default=0.0),
    ),
    columns=(
        ExportColumn("Modelo", "model"),
        ExportColumn("Peso Cheio (g)", "full_weight"),
        ExportColumn("Peso Vazio (g)", "empty_weight"),
        ExportColumn("Impressoras Compatíveis", "compatible_printers"),
        ExportColumn("Cor", "color"),
        ExportColumn("Área ISO", "iso_area", CellFormat.percent),
        ExportColumn("Capacidade", "sheet_capacity"),
        ExportColumn("Tipo", "kind"),
        ExportColumn("Preço", "price", CellFormat.currency),
        ExportColumn("Gramatura", "weight_delta"),
        ExportColumn("Preço/Folha", "price_per_sheet", CellFormat.currency),
    ),
    derive=toner_values,
)
