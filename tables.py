"""Measurement tables projected from Gen1 status fields.

    status_emeters_1_power  -> AC table, column ActivePower_S
    status_meters_0_current -> AC table, column Current_R
    status_temperature      -> Service table, column Temperature
"""

from dataclasses import dataclass, field

NUMBER = "number"

METRIC_COLUMNS = {
    "power": "ActivePower",
    "current": "Current",
    "voltage": "Voltage",
    "total": "TotalConsumption",
    "total_returned": "TotalReturned",
    "pf": "PowerFactor",
}

PHASE_SUFFIXES = {"0": "_R", "1": "_S", "2": "_T"}

TEMPERATURE_FIELD = "status_temperature"


@dataclass(frozen=True)
class TableColumn:
    name: str
    column_type: str = NUMBER


@dataclass(frozen=True)
class TableCell:
    field_name: str


@dataclass
class Table:
    name: str
    columns: list = field(default_factory=list)
    cells: list = field(default_factory=list)   # single row, parallel to columns

    def add_column_and_cell(self, column, cell):
        self.columns.append(column)
        self.cells.append(cell)


def project_tables(fields):
    """Build the AC and Service tables, or return [] if no field fits.

    Metric fields must split into exactly four parts:
    status / <x>meters / phase / metric. "total_returned" therefore never
    lands in a table.
    """
    valid = False
    ac = Table("AC")
    tables = [ac]
    for f in fields:
        cell = TableCell(f.field_name)
        if f.field_name == TEMPERATURE_FIELD:
            service = Table("Service")
            service.add_column_and_cell(TableColumn("Temperature"), cell)
            tables.append(service)
            valid = True
            continue
        pieces = f.field_name.split("_")
        if len(pieces) == 4 and pieces[0] == "status" and pieces[1].endswith("meters"):
            name = METRIC_COLUMNS.get(pieces[3])
            if name is not None:
                suffix = PHASE_SUFFIXES.get(pieces[2], "")
                ac.add_column_and_cell(TableColumn(name + suffix), cell)
                valid = True
    return tables if valid else []
