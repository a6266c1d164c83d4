from .retrieval_metrics import evaluate_results, hit_at_k, mrr, ndcg_at_k, precision_at_k, recall_at_k
from .answer_metrics import answer_confidence, answer_faithfulness, exact_match, f1_score, hallucination_check
from .eval_set import load_eval_set
from .run_eval import WEIGHT_VARIANTS, compute_metrics, format_table, run_eval, run_pipeline

__all__ = [
    "evaluate_results",
    "hit_at_k",
    "mrr",
    "ndcg_at_k",
    "precision_at_k",
    "recall_at_k",
    "answer_confidence",
    "answer_faithfulness",
    "exact_match",
    "f1_score",
    "hallucination_check",
    "load_eval_set",
    "WEIGHT_VARIANTS",
    "compute_metrics",
    "format_table",
    "run_eval",
    "run_pipeline",
]
