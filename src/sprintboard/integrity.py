"""Invariant audit over a ``ProjectState``.

Checks what the engine guarantees after every operation and classifies
violations (for example in state loaded by a caller) into problem kinds:

* ``duplicate_rank``          – two issues of one sprint/backlog list share a key
* ``duplicate_lane_rank``     – two issues of one lane share a key
* ``dangling_sprint``         – issue references a sprint that does not exist
* ``foreign_sprint``          – issue references a sprint of another project
* ``dangling_lane``           – issue references a lane missing from its project's boards
* ``multiple_active_sprints`` – a project has more than one active sprint

Output structure (stable for JSON tooling):

```
{
    "summary": {"issue_count": int, "sprint_count": int, "problem_count": int},
    "problems": [{"kind": str, "project_id": str, ...}],
    "consistent": bool
}
```
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from .errors import LaneNotFoundError
from .models import SprintState
from .state import ProjectState


def _duplicates(groups: dict[tuple[str, str | None], dict[float, list[str]]], kind: str, scope_field: str) -> list[dict[str, Any]]:
    problems: list[dict[str, Any]] = []
    for (project_id, scope), by_key in sorted(groups.items(), key=lambda kv: (kv[0][0], kv[0][1] or '')):
        for key, ids in sorted(by_key.items()):
            if len(ids) > 1:
                problems.append({
                    'kind': kind,
                    'project_id': project_id,
                    scope_field: scope,
                    'key': key,
                    'issue_ids': sorted(ids),
                })
    return problems


def audit(state: ProjectState) -> dict[str, Any]:
    problems: list[dict[str, Any]] = []
    rank_groups: dict[tuple[str, str | None], dict[float, list[str]]] = defaultdict(lambda: defaultdict(list))
    lane_groups: dict[tuple[str, str | None], dict[float, list[str]]] = defaultdict(lambda: defaultdict(list))

    for issue in sorted(state.issues.values(), key=lambda i: i.id):
        rank_groups[(issue.project_id, issue.sprint_id)][issue.rank].append(issue.id)
        lane_groups[(issue.project_id, issue.lane_id)][issue.lane_rank].append(issue.id)
        if issue.sprint_id is not None:
            sprint = state.sprints.get(issue.sprint_id)
            if sprint is None:
                kind = 'dangling_sprint'
            elif sprint.project_id != issue.project_id:
                kind = 'foreign_sprint'
            else:
                kind = ''
            if kind:
                problems.append({
                    'kind': kind,
                    'project_id': issue.project_id,
                    'issue_id': issue.id,
                    'sprint_id': issue.sprint_id,
                })
        try:
            state.find_column(issue.project_id, issue.lane_id)
        except LaneNotFoundError:
            problems.append({
                'kind': 'dangling_lane',
                'project_id': issue.project_id,
                'issue_id': issue.id,
                'lane_id': issue.lane_id,
            })

    problems.extend(_duplicates(rank_groups, 'duplicate_rank', 'sprint_id'))
    problems.extend(_duplicates(lane_groups, 'duplicate_lane_rank', 'lane_id'))

    active: dict[str, list[str]] = defaultdict(list)
    for sprint in state.sprints.values():
        if sprint.state is SprintState.ACTIVE:
            active[sprint.project_id].append(sprint.id)
    for project_id, sprint_ids in sorted(active.items()):
        if len(sprint_ids) > 1:
            problems.append({
                'kind': 'multiple_active_sprints',
                'project_id': project_id,
                'sprint_ids': sorted(sprint_ids),
            })

    return {
        'summary': {
            'issue_count': len(state.issues),
            'sprint_count': len(state.sprints),
            'problem_count': len(problems),
        },
        'problems': problems,
        'consistent': not problems,
    }


def format_report(report: dict[str, Any]) -> list[str]:  # return list of human lines
    summary = report.get('summary', {})
    lines: list[str] = []
    if report.get('consistent'):
        lines.append(
            f"[audit] State consistent (issues={summary.get('issue_count', 0)}, "
            f"sprints={summary.get('sprint_count', 0)})"
        )
        return lines
    lines.append(
        f"[audit] Problems: {summary.get('problem_count')} (issues={summary.get('issue_count')}, "
        f"sprints={summary.get('sprint_count')})"
    )
    for entry in report.get('problems', []):
        kind = entry.get('kind')
        if kind in {'duplicate_rank', 'duplicate_lane_rank'}:
            scope = entry.get('sprint_id') if kind == 'duplicate_rank' else entry.get('lane_id')
            ids = ','.join(entry.get('issue_ids', []))
            lines.append(f"  {kind}: {scope or 'backlog'} key={entry.get('key')} issues=[{ids}]")
        elif kind in {'dangling_sprint', 'foreign_sprint'}:
            lines.append(f"  {kind}: {entry.get('issue_id')} -> {entry.get('sprint_id')}")
        elif kind == 'dangling_lane':
            lines.append(f"  dangling_lane: {entry.get('issue_id')} -> {entry.get('lane_id')}")
        elif kind == 'multiple_active_sprints':
            lines.append(
                f"  multiple_active_sprints: {entry.get('project_id')} "
                f"[{','.join(entry.get('sprint_ids', []))}]"
            )
    return lines


__all__ = ['audit', 'format_report']
