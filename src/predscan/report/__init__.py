"""Report boundary: ScanResult export and text renderers."""
