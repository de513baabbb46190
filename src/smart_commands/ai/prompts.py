"""Prompts sent to the AI suggestion service."""

from __future__ import annotations

from smart_commands.parser.structure import CommandStructure


def wrap_prompt(user_input: str, context: str) -> str:
    """Frame an instruction and the user's input as a single prompt."""
    return (
        f"You are a Linux/macOS terminal expert. {context}\n\n"
        f"User input: {user_input}\n\n"
        "Provide helpful, accurate terminal commands. Be concise and practical."
    )


def validation_prompt(command: str, structure: CommandStructure) -> str:
    """Full semantic validation prompt; the reply is a JSON object."""
    lines = [
        "You are a command line expert. Analyze this command and respond in JSON format:",
        "",
        f"Command: {command}",
        "",
        "Command structure analysis:",
        f"- Base command: {structure.base_command}",
    ]
    if structure.has_subcommand:
        lines.append(f"- Subcommand: {structure.subcommand}")
    if structure.has_flags:
        lines.append(f"- Flags: {', '.join(structure.flags)}")
    if structure.has_arguments:
        lines.append(f"- Arguments: {', '.join(structure.arguments)}")

    lines += [
        "",
        "Respond with exactly one of these JSON objects:",
        "",
        "1. If command is correct:",
        '{"type":"VALID","message":"Command is correct"}',
        "",
        "2. If command has typos or errors:",
        '{"type":"CORRECTION","suggestion":"corrected_command","message":"Brief explanation"}',
        "",
        "3. If you have alternative suggestions:",
        '{"type":"SUGGESTION","suggestion":"suggested_command","message":"Did you mean...?"}',
        "",
        "VALIDATION FOCUS:",
        "- Validate semantic correctness (will this command do what's intended?)",
        "- Check for runtime issues (missing required flags, wrong flag combinations)",
        "- Verify argument ordering and syntax",
        "- Structural validation already passed, focus on semantic issues",
        "- Response must be valid JSON only, no extra text",
    ]
    return "\n".join(lines)


def base_command_prompt(structure: CommandStructure) -> str:
    """Ask for the corrected base command alone."""
    return (
        f"The user entered: '{structure.raw_command}'\n"
        f"The base command is: '{structure.base_command}'\n"
        f"Subcommand: {structure.subcommand or 'none'}\n"
        f"Flags: {list(structure.flags)}\n"
        f"Arguments: {list(structure.arguments)}\n\n"
        f"If the base command '{structure.base_command}' is a typo, correct it. "
        "If it's correct, return it unchanged.\n"
        "IMPORTANT: Respond with ONLY the corrected base command word. "
        "No subcommand, no flags, no arguments.\n"
        "Example: if base command is 'lss', respond with 'ls'\n"
        "Example: if base command is 'gti', respond with 'git'\n"
        "Example: if base command is 'docker', respond with 'docker'"
    )


def subcommand_prompt(structure: CommandStructure) -> str:
    """Ask for the corrected subcommand alone."""
    return (
        f"The user entered: '{structure.raw_command}'\n"
        f"The base command is: '{structure.base_command}'\n"
        f"The subcommand is: '{structure.subcommand}'\n"
        f"Flags: {list(structure.flags)}\n"
        f"Arguments: {list(structure.arguments)}\n\n"
        f"If the subcommand '{structure.subcommand}' is a typo, correct it. "
        "If it's correct, return it unchanged.\n"
        "IMPORTANT: Respond with ONLY the corrected subcommand word. "
        "No base command, no flags, no arguments.\n"
        "Example: if subcommand is 'sp', respond with 'ps'\n"
        "Example: if subcommand is 'stauts', respond with 'status'\n"
        "Example: if subcommand is 'get', respond with 'get'"
    )


def correction_prompt(command: str) -> str:
    """Ask for a corrected version of a whole command."""
    return (
        f"The user entered the command '{command}' which is incorrect. "
        "You must suggest the correct Linux/macOS terminal command. "
        "IMPORTANT: Respond with ONLY the exact command name and arguments, nothing else. "
        "Do NOT suggest script names, do NOT suggest file names, do NOT add explanations. "
        "Examples: 'colma start' -> 'colima start', 'lsl' -> 'ls'. "
        "Respond with ONLY the corrected command, no markdown, no code blocks."
    )


def task_prompt(task: str) -> str:
    """Ask for the command(s) that accomplish a natural-language task."""
    return (
        f"The user wants to: {task}. "
        "Please provide the most appropriate Linux/macOS terminal command(s) to accomplish this task. "
        "Format your response as a single line with the command(s), "
        "separated by && if multiple commands are needed. "
        "Do not include explanations, only the command(s), no markdown formatting, no code blocks."
    )
