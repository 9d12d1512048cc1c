import re

NEEDS_QUOTES_RE = re.compile(r'[",\n]')


def parse_csv(text):
    """
    Split CSV text into rows of cells.
    Quoted cells may hold commas, newlines, and doubled quotes ("").
    Carriage returns are ignored and rows with only blank cells are dropped.
    """
    rows = []
    row = []
    cell = []
    in_quotes = False
    i = 0

    while i < len(text):
        ch = text[i]
        if in_quotes:
            if ch == '"':
                if text[i + 1:i + 2] == '"':
                    cell.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                cell.append(ch)
        elif ch == '"':
            in_quotes = True
        elif ch == ",":
            row.append("".join(cell))
            cell = []
        elif ch == "\n":
            row.append("".join(cell))
            rows.append(row)
            row, cell = [], []
        elif ch != "\r":
            cell.append(ch)
        i += 1

    if cell or row:
        row.append("".join(cell))
        rows.append(row)

    return [r for r in rows if any(c.strip() for c in r)]


def _escape(value):
    if value is None:
        return ""
    text = str(value)
    if NEEDS_QUOTES_RE.search(text):
        return '"' + text.replace('"', '""') + '"'
    return text


def to_csv(rows, headers):
    """Render dict rows as CSV text with the given column order (no trailing newline)."""
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(_escape(row.get(h)) for h in headers))
    return "\n".join(lines)


def validate_csv_headers(actual_headers, expected_headers):
    missing = [h for h in expected_headers if h not in actual_headers]
    if missing:
        return [f"Missing required columns: {', '.join(missing)}"]
    return []
