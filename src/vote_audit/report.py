"""Human-readable report for an analysis result."""

from __future__ import annotations

from vote_audit.pipeline import AnalysisResult


def _format_fraud_section(result: AnalysisResult) -> list[str]:
    lines = ["Suspicious candidates (vote manipulation):"]
    if not result.ranking.fraud_candidates:
        lines.append("  none")
        return lines
    for verdict in result.ranking.fraud_candidates:
        votes = result.corrected_votes.get(verdict.candidate, verdict.vote_count)
        lines.append(f"  {verdict.candidate}: {votes} votes, score {verdict.score}")
        for reason in verdict.reasons:
            lines.append(f"    - {reason}")
    return lines


def _format_ranking_section(result: AnalysisResult) -> list[str]:
    size = len(result.ranking.clean_ranking)
    lines = [f"Final ranking (top {size}):"]
    for rank, (candidate, votes) in enumerate(result.ranking.clean_ranking, start=1):
        lines.append(f"{rank}. {candidate}: {votes} votes")
    return lines


def _format_statistics_section(result: AnalysisResult) -> list[str]:
    lines = ["Suspicious candidate statistics:"]
    for verdict in result.ranking.fraud_candidates:
        features = result.features.get(verdict.candidate)
        if features is None:
            continue
        line = (
            f"{verdict.candidate}: {features.total_votes} votes from {features.unique_ips} unique IPs"
            f" (average {features.votes_per_ip:.2f} votes/IP"
        )
        if features.total_votes > 1 and features.time_range_seconds > 0:
            line += f", {features.total_votes / features.time_range_seconds:.2f} votes/sec"
        lines.append(line + ")")
    return lines


def format_report(result: AnalysisResult) -> str:
    """Render the fraud list, the clean ranking, and fraud statistics."""

    sections = [
        _format_fraud_section(result),
        _format_ranking_section(result),
        _format_statistics_section(result),
    ]
    return "\n\n".join("\n".join(section) for section in sections) + "\n"
