from app.exchange.entity import CellFormat, EntityDefinition, ExportColumn
from app.exchange.fields import Coercion, FieldSpec

DEFAULT_STATUS = "Aberta"

WARRANTIES = EntityDefinition(
    name="warranties",
    table="warranties",
    sheet_title="Garantias",
    file_stem="garantias",
    fields=(
        FieldSpec("requester", "Solicitante", default=""),
        FieldSpec("request_date", "Data Solicitação", Coercion.date),
        FieldSpec("product_code", "Código Produto", default=""),
        FieldSpec("serial_number", "Número Série", default=""),
        FieldSpec("kind", "Tipo", Coercion.enum),
        FieldSpec("purchase_invoice", "NF Compra", default=""),
        FieldSpec("shipment_invoice", "NF Remessa", default=""),
        FieldSpec("return_invoice", "NF Devolução", default=""),
        FieldSpec("purchase_invoice_key", "Chave NF Compra", default=""),
        FieldSpec("shipment_invoice_key", "Chave NF Remessa", default=""),
        FieldSpec("return_invoice_key", "Chave NF Devolução", default=""),
        FieldSpec("warranty_date", "Data Garantia", Coercion.date),
        FieldSpec("ticket_number", "Número Ticket", default=""),
        FieldSpec("status", "Status", Coercion.enum, default=DEFAULT_STATUS),
        FieldSpec("supplier", "Fornecedor", default=""),
        FieldSpec("quantity", "Quantidade", Coercion.number, default=1.0),
        FieldSpec("defect_notes", "Observação Defeito", default=""),
        FieldSpec("total_value", "Valor Total", Coercion.number, default=0.0),
    ),
    columns=(
        ExportColumn("Solicitante", "requester"),
        ExportColumn("Data Solicitação", "request_date"),
        ExportColumn("Código Produto", "product_code"),
        ExportColumn("Número Série", "serial_number"),
        ExportColumn("Tipo", "kind"),
        ExportColumn("NF Compra", "purchase_invoice"),
        ExportColumn("NF Remessa", "shipment_invoice"),
        ExportColumn("NF Devolução", "return_invoice"),
        ExportColumn("Chave NF Compra", "purchase_invoice_key"),
        ExportColumn("Chave NF Remessa", "shipment_invoice_key"),
        ExportColumn("Chave NF Devolução", "return_invoice_key"),
        ExportColumn("Data Garantia", "warranty_date"),
        ExportColumn("Número Ticket", "ticket_number"),
        ExportColumn("Status", "status"),
        ExportColumn("Fornecedor", "supplier"),
        ExportColumn("Quantidade", "quantity"),
        ExportColumn("Observação Defeito", "defect_notes"),
        ExportColumn("Valor Total", "total_value", CellFormat.currency),
    ),
)
