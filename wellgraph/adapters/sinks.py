"""Sinks that mirror request lineage records."""

from pathlib import Path

from wellgraph.models.lineage import LineageRecord


class LineageSink:
    """Protocol for receiving lineage records."""

    def append(self, record: LineageRecord) -> None:
        """Append a record to the sink."""
        raise NotImplementedError


class ListSink(LineageSink):
    """Stores records in a list."""

    def __init__(self) -> None:
        self.records: list[LineageRecord] = []

    def append(self, record: LineageRecord) -> None:
        """Append a record to the list."""
        self.records.append(record)

    def clear(self) -> None:
        """Clear all records."""
        self.records.clear()


class FileSink(LineageSink):
    """Writes records to a JSONL file, one line per status change."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: LineageRecord) -> None:
        """Append a record to the file."""
        with open(self.path, "a") as f:
            f.write(record.model_dump_json() + "\n")

    def read(self) -> list[LineageRecord]:
        """Load every record written so far."""
        if not self.path.exists():
            return []
        records = []
        with open(self.path) as f:
            for line in f:
                line = line.strip()
                if line:
                    records.append(LineageRecord.model_validate_json(line))
        return records
