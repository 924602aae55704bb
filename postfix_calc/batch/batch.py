"""Evaluate every expression of a text file or archive."""
import lzma
from pathlib import Path
import tarfile
import tempfile
from typing import List, Optional
import zipfile

import py7zr
from py7zr.exceptions import ArchiveError
from pydantic import BaseModel, ConfigDict, Field, FilePath

from postfix_calc.common.logger import logger
from postfix_calc.common.models import EvaluationResult
from postfix_calc.common.parser import ExpressionParser


def build_output_path(input_path: Path) -> Path:
    """
    Construct an output file path next to the input file.

    Examples
    --------
    input: resources/operations.7z
    output: resources/operations_7z_results.txt

    :param Path input_path: Path to the input file
    :return: Path to the output file
    :rtype: Path
    """
    suffixes = "".join(input_path.suffixes)
    stem = input_path.name[: len(input_path.name) - len(suffixes)] if suffixes else input_path.name
    return input_path.with_name(f"{stem}{suffixes.replace('.', '_')}_results.txt")


def format_result(result: EvaluationResult) -> str:
    """
    Render one evaluation as an output line (without newline).

    :param EvaluationResult result: Evaluation outcome

    :return: "<expression> = <value>" or "<expression> -> ERROR: <message>"
    :rtype: str
    """
    if result.ok:
        return f"{result.expression} = {result.value!r}"
    return f"{result.expression} -> ERROR: {result.error}"


class BatchEvaluator(BaseModel):
    """
    Evaluate a file of expressions, one per line, sequentially.

    The input is either a plain text file or an archive holding a .txt file:
    - .zip
    - .tar.xz
    - .7z
    """

    model_config = ConfigDict(frozen=True)

    input_file: FilePath = Field(..., description="Text file or archive with one expression per line")
    output_file: Path = Field(..., description="Path to write evaluation results")
    lenient_underflow: Optional[bool] = Field(default=None, description="Substitute identity values for missing operands, None for the module default")

    def read_expressions(self) -> List[str]:
        """
        Load the input and return its non-empty lines.

        :return: List of stripped expression lines
        :rtype: List[str]
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        if self.input_file.suffix == ".txt":
            content = self.input_file.read_text(encoding="utf-8")
        else:
            content = self._extract_archive(self.input_file)
        # Remove empty lines
        return [line.strip() for line in content.splitlines() if line.strip()]

    def _extract_archive(self, archive_path: Path) -> str:
        """
        Extract the first .txt file found in a supported archive and return its content.

        :param Path archive_path: Path to the archive file

        :return: Content of the extracted .txt file
        :rtype: str
        :raises ValueError: If the archive is unreadable, holds no .txt file or its format is unsupported
        """
        try:
            return self._read_first_txt(archive_path)
        except (zipfile.BadZipFile, tarfile.TarError, ArchiveError, lzma.LZMAError, EOFError, OSError) as exc:
            raise ValueError(f"📄❌ Could not read archive {archive_path}: {exc}") from exc

    def _read_first_txt(self, archive_path: Path) -> str:
        """Read the first .txt member of an archive without trusting member paths."""
        if archive_path.suffix == ".zip":
            with zipfile.ZipFile(archive_path, "r") as zf:
                txt_files = [f for f in zf.namelist() if f.endswith(".txt")]
                if not txt_files:
                    raise ValueError("📄❌ No .txt file found in zip archive")
                return zf.read(txt_files[0]).decode("utf-8")

        elif archive_path.suffixes[-2:] == [".tar", ".xz"]:
            with tarfile.open(archive_path, "r:xz") as tf:
                txt_files = [m for m in tf.getmembers() if m.isfile() and m.name.endswith(".txt")]
                if not txt_files:
                    raise ValueError("📄❌ No .txt file found in tar.xz archive")
                member = tf.extractfile(txt_files[0])
                return member.read().decode("utf-8")

        elif archive_path.suffix == ".7z":
            # Create a temporary directory for extraction; the member must land inside it
            with tempfile.TemporaryDirectory() as tmpdir:
                tmpdir_path = Path(tmpdir).resolve()
                with py7zr.SevenZipFile(archive_path, mode="r") as archive:
                    txt_files = [f for f in archive.getnames() if f.endswith(".txt")]
                    if not txt_files:
                        raise ValueError("📄❌ No .txt file found in 7z archive")
                    archive.extract(path=tmpdir_path, targets=[txt_files[0]])
                extracted = (tmpdir_path / txt_files[0].lstrip("/\\")).resolve()
                if not extracted.is_relative_to(tmpdir_path) or not extracted.is_file():
                    raise ValueError(f"📄❌ Unsafe or missing 7z member: {txt_files[0]}")
                return extracted.read_text(encoding="utf-8")

        raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")

    def run(self) -> List[EvaluationResult]:
        """
        Evaluate every expression and write results to the output file as they complete.

        Errors on a line are written to the output and never stop the batch.

        :return: Evaluation results in input order
        :rtype: List[EvaluationResult]
        :raises ValueError: If the input cannot be read
        """
        expressions: List[str] = self.read_expressions()
        logger.info(f"📄 Evaluating {len(expressions)} expressions from {self.input_file}")

        results: List[EvaluationResult] = []
        with self.output_file.open("w", encoding="utf-8") as f_out:
            for line_number, expr in enumerate(expressions, start=1):
                result = ExpressionParser.evaluate(expr, lenient=self.lenient_underflow)
                if not result.ok:
                    logger.info(f"📄❌ Line {line_number} failed: {result.error}")
                results.append(result)
                f_out.write(format_result(result) + "\n")
                f_out.flush()

        logger.info(f"📄✅ Results written to {self.output_file}")
        return results
