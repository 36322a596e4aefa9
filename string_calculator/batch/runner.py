"""Evaluate every line of a batch file using worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection, wait
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from pydantic import BaseModel, Field, FilePath

from string_calculator.batch.archive import read_expressions
from string_calculator.batch.worker import WorkerProcess
from string_calculator.common.logger import logger
from string_calculator.common.models import EvaluationFailure, EvaluationRequest, Outcome, outcome_adapter


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations.7z
    output: resources/operations_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    suffixes = "".join(input_path.suffixes)
    stem = input_path.name[: -len(suffixes)] if suffixes else input_path.name
    suffix_safe = suffixes.replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


class BatchRunner(BaseModel):
    """
    Evaluate a file of expressions, one independent expression per line.

    Features:
        - Spawns one worker process per expression.
        - Writes outcomes immediately to disk as soon as a worker finishes.
        - Ensures each worker is destroyed immediately after finishing.
        - Handles multiple simultaneous workers up to CPU core count.
        - Rewrites the output file in input order once every worker is done.
    """

    output_file: Path = Field(..., description="Path to write computation results")
    precision: int = Field(default=7, ge=0, le=15, description="Fractional digits of rendered results")
    unary_minus: bool = Field(default=True, description="Accept prefix '+'/'-' signs")
    max_workers: Optional[int] = Field(default=None, ge=1, description="Worker limit, defaults to CPU count")
    poll_interval: float = Field(default=1.0, gt=0, description="Seconds to wait for a worker before rechecking")

    @staticmethod
    def _load_requests(content: str) -> List[EvaluationRequest]:
        """
        Turn raw text into one request per non-empty line.

        :param str content: Text with one expression per line

        :return: Requests numbered after their line in the input
        :rtype: List[EvaluationRequest]
        """
        return [
            EvaluationRequest(expression=line.strip(), line_number=line_number)
            for line_number, line in enumerate(content.splitlines(), start=1)
            if line.strip()
        ]

    def _spawn_worker(self, request: EvaluationRequest) -> Tuple[Process, Connection, EvaluationRequest]:
        """
        Spawn a WorkerProcess for the given request and return process and pipe.

        :param EvaluationRequest request: Expression and its line number

        :return: Tuple of (Process, parent_pipe, request)
        :rtype: Tuple[Process, Connection, EvaluationRequest]
        """
        parent_conn, child_conn = Pipe()
        worker = WorkerProcess(
            conn=child_conn,
            expression=request.expression,
            line_number=request.line_number,
            unary_minus=self.unary_minus,
        )
        process = Process(target=worker.run)
        process.start()
        # The child owns its end now
        child_conn.close()
        return process, parent_conn, request

    def _receive_outcome(self, pipe_conn: Connection, request: EvaluationRequest) -> Outcome:
        """Read a worker's outcome, or describe the crash if it sent nothing."""
        try:
            payload = pipe_conn.recv()
        except EOFError:
            logger.error(f"👷💥 Worker for line {request.line_number} exited without a result")
            return EvaluationFailure(
                line_number=request.line_number,
                expression=request.expression,
                kind="worker",
                error="Worker exited without a result",
            )
        return outcome_adapter.validate_python(payload)

    def _collect_finished_workers(
        self,
        active_workers: List[Tuple[Process, Connection, EvaluationRequest]],
        f_out: TextIO,
        outcomes: List[Outcome],
    ) -> None:
        """
        Collect outcomes from all finished workers and write them to the output file.

        Finished workers are removed from the active_workers list.

        :param list active_workers: List of tuples (Process, Pipe, EvaluationRequest)
        :param file f_out: Open file handle for writing results
        :param list outcomes: Collected outcomes, extended in place
        """
        # Block until a worker reports; the timeout also catches crashed workers
        ready = wait([pipe_conn for _, pipe_conn, _ in active_workers], timeout=self.poll_interval)

        # Iterate in reverse to safely remove finished workers while iterating
        for i in reversed(range(len(active_workers))):
            proc, pipe_conn, request = active_workers[i]
            if pipe_conn in ready or not proc.is_alive():
                outcome = self._receive_outcome(pipe_conn, request)
                pipe_conn.close()
                proc.join()
                active_workers.pop(i)

                # Write output immediately
                f_out.write(outcome.render(self.precision) + "\n")
                f_out.flush()
                outcomes.append(outcome)

    def run(self, input_file: FilePath) -> List[Outcome]:
        """
        Evaluate every expression of ``input_file`` and write the results file.

        Steps:
            1. Read expressions from the text file or archive.
            2. Spawn worker processes for each expression, respecting max workers.
            3. Write each outcome as soon as its worker finishes.
            4. Rewrite the output file sorted by input line.

        :param FilePath input_file: Path to a ``.txt`` file or supported archive

        :return: Outcomes sorted by line number
        :rtype: List[Outcome]
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        requests = self._load_requests(read_expressions(input_file))
        logger.info(f"📄 Loaded {len(requests)} expressions from {input_file}")

        outcomes: List[Outcome] = []
        with self.output_file.open("w", encoding="utf-8") as f_out:
            # Limit number of active workers to CPU cores or number of expressions
            max_workers: int = max(1, min(self.max_workers or cpu_count(), len(requests)))
            active_workers: List[Tuple[Process, Connection, EvaluationRequest]] = []

            for request in requests:
                # Wait until a worker slot is available
                while len(active_workers) >= max_workers:
                    self._collect_finished_workers(active_workers, f_out, outcomes)

                # Spawn new worker for current expression
                active_workers.append(self._spawn_worker(request))

            # Collect remaining active workers
            while active_workers:
                self._collect_finished_workers(active_workers, f_out, outcomes)

        outcomes.sort(key=lambda outcome: outcome.line_number)
        self.output_file.write_text(
            "".join(outcome.render(self.precision) + "\n" for outcome in outcomes),
            encoding="utf-8",
        )
        logger.info(f"✉️ Results written to {self.output_file}")
        return outcomes
