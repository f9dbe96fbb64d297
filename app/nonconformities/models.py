from enum import StrEnum


class NonconformityStatus(StrEnum):
    open = "Aberta"
    in_progress = "Em andamento"
    concluded = "Concluída"
    rejected = "Rejeitada"
