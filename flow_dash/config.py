from dataclasses import dataclass

@dataclass
class Config:
    timezone: str = "America/Sao_Paulo"
    label_format: str = "short"   # "short" -> DD/MM, "long" -> DD/MM/YYYY
    locale: str = "pt"            # month names for monthly labels
    percentile: float = 0.8
    max_week: int = 52            # week numbers above this roll into the next year
    outdir: str = "reports"
    save_charts: bool = True
