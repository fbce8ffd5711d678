import itertools
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from speech_score.errors import SpeechScoreError
from speech_score.log import get_logger
from speech_score.models import TranscriptionResult
from speech_score.pipeline import ProgressCallback, SpeechEvaluator

logger = get_logger(__name__)

@dataclass
class EvaluationJob:
    job_id: int
    source: bytes | str | Path
    reference: Optional[str] = None
    on_progress: Optional[ProgressCallback] = None

@dataclass
class JobResult:
    job_id: int
    source: bytes | str | Path
    result: Optional[TranscriptionResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

class EvaluationWorker:
    """
    Runs pipeline jobs one at a time on a background thread.

    Keeps the model call off the caller's thread and guarantees at most one
    run() in flight on the shared session. Results are posted to
    ``results`` in submission order.
    """

    def __init__(self, evaluator: SpeechEvaluator, results: Optional[queue.Queue] = None):
        self.evaluator = evaluator
        self.jobs: queue.Queue[EvaluationJob] = queue.Queue()
        self.results: queue.Queue[JobResult] = results if results is not None else queue.Queue()

        self.running = False
        self.thread = None
        self._ids = itertools.count(1)

    def submit(self, source: bytes | str | Path, reference: Optional[str] = None,
               on_progress: Optional[ProgressCallback] = None) -> int:
        job = EvaluationJob(job_id=next(self._ids), source=source, reference=reference, on_progress=on_progress)
        self.jobs.put(job)
        return job.job_id

    def _process(self, job: EvaluationJob) -> JobResult:
        try:
            result = self.evaluator.process(job.source, reference=job.reference, on_progress=job.on_progress)
            return JobResult(job_id=job.job_id, source=job.source, result=result)
        except (SpeechScoreError, OSError) as e:
            logger.error(f"[WORKER] Job {job.job_id} failed ({type(e).__name__}): {e}")
            return JobResult(job_id=job.job_id, source=job.source, error=e)
        except Exception as e:
            # Keep the thread alive; the caller still gets the exception back.
            logger.exception(f"[WORKER] Job {job.job_id} crashed: {e}")
            return JobResult(job_id=job.job_id, source=job.source, error=e)

    def _run(self):
        logger.debug("[WORKER] Thread started")
        while self.running:
            try:
                job = self.jobs.get(timeout=0.5)
            except queue.Empty:
                continue

            self.results.put(self._process(job))
            self.jobs.task_done()
        logger.debug("[WORKER] Thread stopped")

    def start(self):
        self.running = True
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()

    def stop(self):
        self.running = False
        if self.thread:
            self.thread.join()
            self.thread = None
