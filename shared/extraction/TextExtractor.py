"""Plain-text extraction for the supported upload formats."""

import csv
import io
import os

import docx
import fitz
import openpyxl
import xlrd

from shared.exceptions.AppError import ExtractionFailedError
from shared.helper.HelperConfig import HelperConfig


class TextExtractor:
    """Turns a stored upload into plain text, dispatching on the file extension."""

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()
        self._handlers = {
            ".txt": self._extract_txt,
            ".csv": self._extract_txt,
            ".pdf": self._extract_pdf,
            ".docx": self._extract_docx,
            ".xlsx": self._extract_xlsx,
            ".xls": self._extract_xls,
        }

    def get_supported_extensions(self) -> list[str]:
        return sorted(self._handlers)

    def extract(self, file_path: str) -> str:
        """Extract the text of a file.

        Args:
            file_path (str): Path of the stored upload.

        Returns:
            str: The extracted text (may be empty).

        Raises:
            ExtractionFailedError: If the type is unsupported or the file cannot be parsed.
        """
        ext = os.path.splitext(file_path)[1].lower()
        handler = self._handlers.get(ext)
        try:
            if handler is None:
                raise ValueError(f"Unsupported file type: {ext or '(none)'}")
            return handler(file_path)
        except Exception as exc:
            self.logging.error("Error extracting text from %s: %s", file_path, exc)
            raise ExtractionFailedError(f"Failed to extract text: {exc}") from exc

    def _extract_txt(self, file_path: str) -> str:
        with open(file_path, "r", encoding="utf-8") as f:
            return f.read()

    def _extract_pdf(self, file_path: str) -> str:
        with fitz.open(file_path) as pdf:
            return "".join(page.get_text() for page in pdf)

    def _extract_docx(self, file_path: str) -> str:
        document = docx.Document(file_path)
        return "\n".join(paragraph.text for paragraph in document.paragraphs)

    @staticmethod
    def _sheets_to_csv(sheets) -> str:
        # each sheet as CSV, sheets separated by a newline
        text = ""
        for rows in sheets:
            buffer = io.StringIO()
            writer = csv.writer(buffer, lineterminator="\n")
            for row in rows:
                writer.writerow(["" if value is None else value for value in row])
            text += buffer.getvalue() + "\n"
        return text

    def _extract_xlsx(self, file_path: str) -> str:
        workbook = openpyxl.load_workbook(file_path, read_only=True, data_only=True)
        try:
            return self._sheets_to_csv(sheet.iter_rows(values_only=True) for sheet in workbook.worksheets)
        finally:
            workbook.close()

    def _extract_xls(self, file_path: str) -> str:
        # legacy BIFF workbooks; xlrd reports every number as float
        workbook = xlrd.open_workbook(file_path, on_demand=True)
        try:
            return self._sheets_to_csv(
                (
                    [int(value) if isinstance(value, float) and value.is_integer() else value for value in sheet.row_values(index)]
                    for index in range(sheet.nrows)
                )
                for sheet in workbook.sheets()
            )
        finally:
            workbook.release_resources()
