"""Static fallback verdicts used when the AI service cannot be consulted."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from thefuzz import fuzz, process

from smart_commands.metadata.store import is_known_flag
from smart_commands.suggestion import Suggestion
from smart_commands.validation.structural import UNIVERSAL_FLAGS, StructuralValidator

logger = logging.getLogger(__name__)

HELP_HINT = "Type 'sc \"describe what you want to do\"' for help."


@dataclass(frozen=True)
class CommandKnowledge:
    """What the fallback table knows about one subcommand-taking command."""

    subcommands: frozenset[str] = field(default_factory=frozenset)
    flags: dict[str, frozenset[str]] = field(default_factory=dict)
    subcommand_typos: dict[str, str] = field(default_factory=dict)

    def is_valid_subcommand(self, subcommand: str) -> bool:
        return subcommand.lower() in self.subcommands

    def correct_subcommand_typo(self, subcommand: str) -> str | None:
        return self.subcommand_typos.get(subcommand.lower())

    def flags_for(self, subcommand: str) -> frozenset[str] | None:
        return self.flags.get(subcommand.lower())

    def is_valid_flag(self, subcommand: str, flag: str) -> bool:
        flags = self.flags_for(subcommand)
        if flags is None:
            return True
        return is_known_flag(flag, flags)


DEFAULT_KNOWLEDGE = {
    "docker": CommandKnowledge(
        subcommands=frozenset({
            "ps", "run", "stop", "start", "restart", "rm", "rmi", "images",
            "exec", "logs", "build", "pull", "push", "tag", "inspect",
            "network", "volume", "compose", "stats",
        }),
        flags={
            "ps": frozenset({"-a", "--all", "-q", "--quiet", "-s", "--size", "-f", "--filter", "-n", "--last"}),
            "run": frozenset({"-d", "--detach", "-p", "--publish", "-v", "--volume", "-e", "--env", "--name", "-it", "--rm"}),
            "logs": frozenset({"-f", "--follow", "-t", "--timestamps", "--tail", "--since"}),
            "images": frozenset({"-a", "--all", "-q", "--quiet", "-f", "--filter"}),
            "stop": frozenset({"-t", "--time"}),
            "rm": frozenset({"-f", "--force", "-v", "--volumes"}),
        },
        subcommand_typos={
            "sp": "ps", "pss": "ps", "psw": "ps", "stat": "stats",
            "strat": "start", "runn": "run", "rnu": "run",
            "buld": "build", "biuld": "build", "psuh": "push", "puh": "push",
            "pll": "pull", "plul": "pull", "exce": "exec", "ecex": "exec",
            "iamges": "images", "imges": "images", "imgaes": "images",
            "compsoe": "compose", "compse": "compose",
        },
    ),
    "git": CommandKnowledge(
        subcommands=frozenset({
            "status", "add", "commit", "push", "pull", "clone", "checkout",
            "branch", "merge", "log", "diff", "reset", "rebase", "fetch",
            "remote", "tag", "stash",
        }),
        flags={
            "status": frozenset({"-s", "--short", "-b", "--branch", "-u", "--untracked-files"}),
            "add": frozenset({"-A", "--all", "-p", "--patch", "-u", "--update"}),
            "commit": frozenset({"-m", "--message", "-a", "--all", "--amend", "-v", "--verbose"}),
            "push": frozenset({"-u", "--set-upstream", "-f", "--force", "--all", "--tags"}),
            "log": frozenset({"--oneline", "--graph", "--all", "-p", "--patch", "-n", "--max-count"}),
        },
        subcommand_typos={
            "stauts": "status", "statsu": "status", "staus": "status", "sttus": "status",
            "comit": "commit", "commti": "commit", "commi": "commit", "cmomit": "commit",
            "pussh": "push", "psuh": "push", "puh": "push", "puhs": "push", "phus": "push", "oush": "push",
            "pll": "pull", "plul": "pull", "lul": "pull", "plll": "pull",
            "chekout": "checkout", "checkotu": "checkout", "checkou": "checkout", "chekcout": "checkout",
            "branhc": "branch", "branc": "branch", "brnch": "branch",
            "mereg": "merge", "merg": "merge", "mrege": "merge",
            "rebsae": "rebase", "reabse": "rebase", "rebas": "rebase",
            "fetc": "fetch", "ftech": "fetch", "fech": "fetch",
            "cloen": "clone", "lcone": "clone", "clon": "clone",
        },
    ),
    "kubectl": CommandKnowledge(
        subcommands=frozenset({
            "get", "describe", "logs", "exec", "apply", "delete", "create",
            "scale", "rollout", "port-forward",
        }),
        flags={
            "get": frozenset({"-o", "--output", "-w", "--watch", "-n", "--namespace", "--all-namespaces"}),
            "logs": frozenset({"-f", "--follow", "-c", "--container", "--tail", "--since"}),
        },
        subcommand_typos={
            "gt": "get", "gte": "get", "ge": "get",
            "desribe": "describe", "descirbe": "describe", "descrbie": "describe",
            "crete": "create", "craete": "create", "creat": "create",
            "delte": "delete", "delet": "delete", "deleet": "delete",
            "appl": "apply", "appyl": "apply", "aply": "apply",
            "excec": "exec", "exce": "exec",
        },
    ),
    "npm": CommandKnowledge(
        subcommands=frozenset({
            "install", "i", "uninstall", "update", "run", "start", "test",
            "build", "init", "publish", "version", "list", "ls", "audit",
        }),
        subcommand_typos={
            "isntall": "install", "instal": "install", "instll": "install",
            "unsintall": "uninstall", "unintsall": "uninstall", "uninstal": "uninstall",
            "udpate": "update", "updte": "update", "updaet": "update",
        },
    ),
    "cargo": CommandKnowledge(
        subcommands=frozenset({
            "build", "run", "test", "check", "new", "init", "add", "clean",
            "doc", "publish", "update", "install", "fmt", "clippy",
        }),
        subcommand_typos={
            "biuld": "build", "buld": "build", "buidl": "build",
            "rnu": "run", "runn": "run", "rn": "run",
            "tset": "test", "tets": "test", "tesst": "test",
        },
    ),
}

DEFAULT_BASE_TYPOS = {
    "gti": "git", "igt": "git", "got": "git",
    "dokcer": "docker", "dcoker": "docker", "docekr": "docker", "doker": "docker",
    "lss": "ls", "lsl": "ls", "sl": "ls", "lls": "ls",
    "mdkir": "mkdir", "mkidr": "mkdir", "mddir": "mkdir",
    "grpe": "grep", "gerp": "grep", "grepp": "grep",
    "chmdo": "chmod", "catt": "cat", "caat": "cat",
    "rrm": "rm", "rmr": "rm", "finnd": "find", "findd": "find",
    "kuebctl": "kubectl", "kubetcl": "kubectl", "kubeclt": "kubectl",
}

DEFAULT_COMMON_COMMANDS = frozenset({
    "ls", "cd", "pwd", "mkdir", "rm", "cp", "mv", "cat", "grep",
    "find", "chmod", "chown", "ps", "kill", "top", "df", "du",
    "tar", "gzip", "ssh", "scp", "wget", "curl", "git", "npm",
    "pip", "docker", "kubectl", "java", "python", "node", "mvn",
    "gradle", "echo", "date", "whoami", "id", "uname", "which",
    "vim", "nano", "emacs", "less", "more", "head", "tail",
    "sort", "uniq", "wc", "diff", "sed", "awk", "make",
    "systemctl", "service", "journalctl", "dmesg", "cargo",
})


class FallbackValidator:
    """Deterministic verdicts from static command knowledge.

    Known commands pass as valid, well-known typos become corrections and
    anything unrecognized becomes an error.
    """

    def __init__(
        self,
        knowledge: dict[str, CommandKnowledge] | None = None,
        base_typos: dict[str, str] | None = None,
        common_commands: Iterable[str] | None = None,
        matcher: StructuralValidator | None = None,
        hint_threshold: int = 75,
    ) -> None:
        """Initialize fallback table.

        Args:
            knowledge: Per-command subcommand, flag and typo knowledge
            base_typos: Misspelled base command -> correct base command
            common_commands: Commands accepted without further checks
            matcher: Closest-match search for subcommands and flags
            hint_threshold: Minimum similarity (0-100) for an unknown-command hint
        """
        self.knowledge = dict(DEFAULT_KNOWLEDGE if knowledge is None else knowledge)
        self.base_typos = dict(DEFAULT_BASE_TYPOS if base_typos is None else base_typos)
        common = DEFAULT_COMMON_COMMANDS if common_commands is None else common_commands
        self.common_commands = frozenset(c.lower() for c in common)
        self.matcher = matcher or StructuralValidator()
        self.hint_threshold = hint_threshold

    def is_known_command(self, base_command: str) -> bool:
        name = base_command.lower()
        return name in self.common_commands or name in self.knowledge

    def correct_base_command(self, base_command: str) -> str | None:
        return self.base_typos.get(base_command.lower())

    def validate(self, command: str | None) -> Suggestion:
        """Produce a verdict without consulting any external service."""
        if command is None or not command.strip():
            return Suggestion.error("Command cannot be empty")

        trimmed = command.strip()
        parts = trimmed.split()
        base_command = parts[0]

        corrected_base = self.correct_base_command(base_command)
        if corrected_base:
            corrected = " ".join([corrected_base, *parts[1:]])
            logger.info(f"Fallback base command correction: {base_command} -> {corrected_base}")
            return Suggestion.correction(trimmed, corrected)

        knowledge = self.knowledge.get(base_command.lower())
        if knowledge is not None:
            return self._validate_with_knowledge(trimmed, parts, knowledge)

        if self.is_known_command(base_command):
            return Suggestion.valid(trimmed)

        message = f"Unknown command: '{base_command}'."
        hint = self._similar_command(base_command)
        if hint:
            message += f" Did you mean '{hint}'?"
        return Suggestion.error(f"{message} {HELP_HINT}")

    def _validate_with_knowledge(
        self,
        command: str,
        parts: list[str],
        knowledge: CommandKnowledge,
    ) -> Suggestion:
        if len(parts) < 2 or parts[1].startswith("-"):
            return Suggestion.valid(command)

        base_command, subcommand = parts[0], parts[1]

        corrected = knowledge.correct_subcommand_typo(subcommand)
        if corrected is None and not knowledge.is_valid_subcommand(subcommand):
            corrected = self.matcher.find_closest_match(subcommand, knowledge.subcommands)
            if corrected is None:
                return Suggestion.error(
                    f"Invalid subcommand: '{subcommand}' for '{base_command}'. "
                    f"Type 'sc \"{base_command} help\"' to see available options."
                )

        if corrected is not None:
            return Suggestion.correction(command, " ".join([base_command, corrected, *parts[2:]]))

        flags = knowledge.flags_for(subcommand)
        for part in parts[2:]:
            if not part.startswith("-") or part in UNIVERSAL_FLAGS:
                continue
            if knowledge.is_valid_flag(subcommand, part):
                continue

            name, sep, value = part.partition("=")
            suggested = self.matcher.find_closest_match(name, flags)
            if suggested is not None:
                fixed = [f"{suggested}{sep}{value}" if p == part else p for p in parts]
                return Suggestion.correction(command, " ".join(fixed))
            break

        return Suggestion.valid(command)

    def _similar_command(self, base_command: str) -> str | None:
        known = sorted(self.common_commands | set(self.knowledge))
        match = process.extractOne(
            base_command.lower(),
            known,
            scorer=fuzz.ratio,
            score_cutoff=self.hint_threshold,
        )
        return match[0] if match else None
