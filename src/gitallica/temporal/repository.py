"""Read-only access to a git repository via the git executable.

This is the only module that spawns git. Everything above it works on the
dataclasses from temporal.models.
"""

from __future__ import annotations

import subprocess
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Optional, Union

from ..exceptions import (
    EmptyRepositoryError,
    GitCommandError,
    NotARepositoryError,
    RepositoryError,
)
from ..logging_config import get_logger
from .authors import AuthorNormalizer
from .models import CommitRecord, FileChange, RefInfo, TreeEntry
from .windows import from_timestamp

logger = get_logger(__name__)

# Well-known id of the empty tree; diffing against it turns every file into an addition.
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

_SEP = "\x1f"
# hash | parents | author name | author email | author time | committer time | subject
_LOG_FORMAT = "%H%x1f%P%x1f%an%x1f%ae%x1f%at%x1f%ct%x1f%s"
_REF_FORMAT = "%(refname)%1f%(objectname)%1f%(*objectname)%1f%(creatordate:unix)"

_BLOB_BATCH = 500


class GitRepository:
    """Thin adapter over `git` for one work tree."""

    def __init__(self, path: Union[str, Path] = ".", authors: Optional[AuthorNormalizer] = None):
        self.requested_path = Path(path).expanduser().resolve()
        self.authors = authors or AuthorNormalizer()
        self.root = self._resolve_root()
        self._head: Optional[str] = None

    # ------------------------------------------------------------------
    # subprocess plumbing
    # ------------------------------------------------------------------

    def _command(self, args: Sequence[str], cwd: Optional[Path] = None) -> list[str]:
        base = cwd or getattr(self, "root", self.requested_path)
        return ["git", "-C", str(base), "-c", "core.quotepath=off", *args]

    def _run(
        self,
        args: Sequence[str],
        input: Optional[bytes] = None,
        check: bool = True,
        cwd: Optional[Path] = None,
    ) -> subprocess.CompletedProcess:
        cmd = self._command(args, cwd)
        logger.debug("running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, input=input, capture_output=True)
        except FileNotFoundError as e:
            raise RepositoryError("git executable not found on PATH") from e
        if check and result.returncode != 0:
            raise GitCommandError(args, result.returncode, result.stderr.decode("utf-8", "replace"))
        return result

    def _text(self, *args: str) -> str:
        return self._run(args).stdout.decode("utf-8", "replace")

    def _resolve_root(self) -> Path:
        if not self.requested_path.is_dir():
            raise NotARepositoryError(self.requested_path)
        result = self._run(
            ["rev-parse", "--show-toplevel"], check=False, cwd=self.requested_path
        )
        if result.returncode != 0:
            raise NotARepositoryError(self.requested_path)
        return Path(result.stdout.decode("utf-8", "replace").strip())

    # ------------------------------------------------------------------
    # commits
    # ------------------------------------------------------------------

    def head(self) -> str:
        """Commit id of HEAD.

        Raises:
            EmptyRepositoryError: if HEAD does not resolve to a commit
        """
        if self._head is None:
            result = self._run(["rev-parse", "--verify", "-q", "HEAD^{commit}"], check=False)
            if result.returncode != 0:
                raise EmptyRepositoryError(self.root)
            self._head = result.stdout.decode().strip()
        return self._head

    def head_ref(self) -> Optional[str]:
        """Full ref name HEAD points at, or None when detached."""
        result = self._run(["symbolic-ref", "-q", "HEAD"], check=False)
        if result.returncode != 0:
            return None
        return result.stdout.decode().strip() or None

    def _parse_commit(self, line: str) -> CommitRecord:
        sha, parents, name, email, authored, committed, subject = line.split(_SEP, 6)
        return CommitRecord(
            hash=sha,
            parents=tuple(parents.split()),
            author_name=name,
            author_email=email,
            author=self.authors(name, email),
            authored_at=from_timestamp(int(authored)),
            committed_at=from_timestamp(int(committed)),
            subject=subject,
        )

    def iter_commits(
        self,
        rev: Optional[str] = None,
        first_parent: bool = False,
        no_merges: bool = False,
    ) -> Iterator[CommitRecord]:
        """Stream commits newest first.

        git is read incrementally so callers that stop early (time cutoffs)
        do not pay for the rest of the history.
        """
        args = ["log", f"--format={_LOG_FORMAT}"]
        if first_parent:
            args.append("--first-parent")
        if no_merges:
            args.append("--no-merges")
        args.append(rev or self.head())

        proc = subprocess.Popen(
            self._command(args), stdout=subprocess.PIPE, stderr=subprocess.PIPE
        )
        finished = False
        try:
            if proc.stdout is None:
                raise GitCommandError(args, -1, "git produced no output stream")
            for raw in proc.stdout:
                line = raw.decode("utf-8", "replace").rstrip("\n")
                if line:
                    yield self._parse_commit(line)
            proc.wait()
            finished = True
            if proc.returncode != 0:
                stderr = proc.stderr.read().decode("utf-8", "replace") if proc.stderr else ""
                raise GitCommandError(args, proc.returncode, stderr)
        finally:
            if not finished and proc.poll() is None:
                proc.kill()
                proc.wait()
            if proc.stdout:
                proc.stdout.close()
            if proc.stderr:
                proc.stderr.close()

    def commit(self, rev: str) -> CommitRecord:
        line = self._text("log", "-1", f"--format={_LOG_FORMAT}", rev).strip()
        return self._parse_commit(line)

    def rev_list(self, *args: str) -> list[str]:
        return self._text("rev-list", *args).split()

    def count_commits(self, since: str, until: str, limit: int) -> int:
        out = self._text("rev-list", "--count", f"--max-count={limit}", f"{since}..{until}")
        return int(out.strip() or 0)

    def merge_base(self, a: str, b: str) -> Optional[str]:
        result = self._run(["merge-base", a, b], check=False)
        if result.returncode == 1:
            return None
        if result.returncode != 0:
            raise GitCommandError(["merge-base", a, b], result.returncode,
                                  result.stderr.decode("utf-8", "replace"))
        return result.stdout.decode().strip() or None

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        args = ["merge-base", "--is-ancestor", ancestor, descendant]
        result = self._run(args, check=False)
        if result.returncode in (0, 1):
            return result.returncode == 0
        raise GitCommandError(args, result.returncode, result.stderr.decode("utf-8", "replace"))

    def root_commit_times(self) -> list:
        """Committer times of every root commit reachable from HEAD."""
        out = self._text("log", "--max-parents=0", "--format=%ct", self.head())
        return [from_timestamp(int(ts)) for ts in out.split()]

    # ------------------------------------------------------------------
    # diffs
    # ------------------------------------------------------------------

    def numstat(self, commit: str, parent: Optional[str] = None) -> list[FileChange]:
        """Per-file added/deleted counts of `commit` against `parent` (empty tree if None)."""
        out = self._run(
            ["diff", "--numstat", "-z", "--no-renames", "--no-ext-diff", parent or EMPTY_TREE, commit]
        ).stdout
        changes = []
        for record in out.split(b"\0"):
            if not record:
                continue
            parts = record.decode("utf-8", "replace").split("\t", 2)
            if len(parts) != 3:
                continue
            added, deleted, path = parts
            if added == "-" or deleted == "-":
                changes.append(FileChange(path=path, added=0, deleted=0, binary=True))
            else:
                changes.append(FileChange(path=path, added=int(added), deleted=int(deleted)))
        return changes

    def changed_paths(self, old: str, new: str) -> list[str]:
        out = self._run(["diff", "--name-only", "-z", "--no-renames", old, new]).stdout
        return [p.decode("utf-8", "replace") for p in out.split(b"\0") if p]

    def added_lines(self, commit: str, parent: Optional[str] = None) -> dict[str, list[str]]:
        """Lines added by `commit` per file. Binary and deleted files are left out."""
        out = self._text(
            "diff",
            "--unified=0",
            "--no-renames",
            "--no-color",
            "--no-ext-diff",
            "--no-textconv",
            parent or EMPTY_TREE,
            commit,
        )
        return parse_added_lines(out)

    # ------------------------------------------------------------------
    # trees and blobs
    # ------------------------------------------------------------------

    def tree(self, rev: Optional[str] = None) -> list[TreeEntry]:
        """All blobs in the tree of `rev` (HEAD by default)."""
        out = self._run(["ls-tree", "-r", "-z", "-l", rev or self.head()]).stdout
        entries = []
        for record in out.split(b"\0"):
            if not record:
                continue
            meta, _, path = record.decode("utf-8", "replace").partition("\t")
            fields = meta.split()
            if len(fields) != 4 or fields[1] != "blob":
                continue
            size = int(fields[3]) if fields[3].isdigit() else 0
            entries.append(TreeEntry(path=path, sha=fields[2], size=size))
        return entries

    def read_blobs(self, shas: Sequence[str]) -> dict[str, bytes]:
        if not shas:
            return {}
        out = self._run(["cat-file", "--batch"], input=("\n".join(shas) + "\n").encode()).stdout
        blobs: dict[str, bytes] = {}
        pos = 0
        while pos < len(out):
            newline = out.index(b"\n", pos)
            header = out[pos:newline].decode("utf-8", "replace").split()
            pos = newline + 1
            if len(header) != 3:
                logger.warning("Skipping unreadable object: %s", " ".join(header))
                continue
            sha, _kind, size = header
            length = int(size)
            blobs[sha] = out[pos : pos + length]
            pos += length + 1
        return blobs

    def iter_contents(self, entries: Iterable[TreeEntry]) -> Iterator[tuple[TreeEntry, bytes]]:
        """Yield (entry, content) pairs, fetching blobs in batches."""
        batch: list[TreeEntry] = []
        for entry in entries:
            batch.append(entry)
            if len(batch) >= _BLOB_BATCH:
                yield from self._flush(batch)
                batch = []
        if batch:
            yield from self._flush(batch)

    def _flush(self, batch: list[TreeEntry]) -> Iterator[tuple[TreeEntry, bytes]]:
        blobs = self.read_blobs(sorted({e.sha for e in batch}))
        for entry in batch:
            data = blobs.get(entry.sha)
            if data is None:
                logger.warning("Could not read %s", entry.path)
                continue
            yield entry, data

    # ------------------------------------------------------------------
    # refs
    # ------------------------------------------------------------------

    def refs(self, *namespaces: str) -> list[RefInfo]:
        out = self._text("for-each-ref", f"--format={_REF_FORMAT}", *namespaces)
        refs = []
        for line in out.splitlines():
            if not line:
                continue
            name, obj, peeled, created = (line.split(_SEP) + ["", "", "", ""])[:4]
            refs.append(
                RefInfo(
                    name=name,
                    target=peeled or obj,
                    created_at=from_timestamp(int(created)) if created.strip() else None,
                )
            )
        return refs

    def branches(self) -> list[RefInfo]:
        return [
            ref
            for ref in self.refs("refs/heads", "refs/remotes")
            if not ref.name.endswith("/HEAD")
        ]

    def tags(self) -> list[RefInfo]:
        return self.refs("refs/tags")


def parse_added_lines(diff_text: str) -> dict[str, list[str]]:
    """Collect '+' lines per destination path from a unified diff."""
    added: dict[str, list[str]] = {}
    current: Optional[str] = None
    in_header = False

    for line in diff_text.split("\n"):
        if line.startswith("diff --git "):
            current = None
            in_header = True
            continue
        if in_header:
            if line.startswith("+++ "):
                target = line[4:].strip().strip('"')
                current = None if target == "/dev/null" else target[2:] if target.startswith("b/") else target
            elif line.startswith("Binary files"):
                current = None
            elif line.startswith("@@"):
                in_header = False
            continue
        if current is not None and line.startswith("+"):
            added.setdefault(current, []).append(line[1:])

    return added
