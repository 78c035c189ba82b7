"""System prompt construction.

Templates use ``{{key}}`` placeholders. Substitution is deliberately partial:
placeholders without a matching variable stay in the output verbatim.
"""

import re
from collections.abc import Mapping, Sequence

_PLACEHOLDER_RE = re.compile(r"{{(\w+)}}")

CONTEXT_PREAMBLE = "\nHere is the context to use to answer the user's question:\n"

TemplateVariables = Mapping[str, str | Sequence[str]]


def default_prompt_template(name: str, description: str) -> str:
    """Build the open-ended conversation prompt for an agent."""
    return f"""You are a {name}. {description} Provide helpful and accurate information based on your expertise.
You will engage in an open-ended conversation, providing helpful and accurate information based on your expertise.
The conversation will proceed as follows:
- The human may ask an initial question or provide a prompt on any topic.
- You will provide a relevant and informative response.
- The human may then follow up with additional questions or prompts related to your previous response, allowing for a multi-turn dialogue on that topic.
- Or, the human may switch to a completely new and unrelated topic at any point.
- You will seamlessly shift your focus to the new topic, providing thoughtful and coherent responses based on your broad knowledge base.
Throughout the conversation, you should aim to:
- Understand the context and intent behind each new question or prompt.
- Provide substantive and well-reasoned responses that directly address the query.
- Draw insights and connections from your extensive knowledge when appropriate.
- Ask for clarification if any part of the question or prompt is ambiguous.
- Maintain a consistent, respectful, and engaging tone tailored to the human's communication style.
- Seamlessly transition between topics as the human introduces new subjects."""


def compose(template: str, variables: TemplateVariables) -> str:
    """Substitute ``{{key}}`` placeholders in a template.

    Args:
        template: Template text.
        variables: Values by placeholder name. Sequence values (other than
            strings) are joined with newlines.

    Returns:
        The rendered text. Unknown placeholders are left untouched.
    """

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in variables:
            return match.group(0)
        value = variables[key]
        if isinstance(value, Sequence) and not isinstance(value, str):
            return "\n".join(str(v) for v in value)
        return str(value)

    return _PLACEHOLDER_RE.sub(_replace, template)


def with_context(prompt: str, retrieved_text: str | None) -> str:
    """Append retrieved context to a prompt, if there is any."""
    if retrieved_text is None:
        return prompt
    return prompt + CONTEXT_PREAMBLE + retrieved_text


class PromptComposer:
    """Holds the prompt template and variables of one agent."""

    def __init__(
        self,
        template: str,
        variables: TemplateVariables | None = None,
    ) -> None:
        self._template = template
        self._variables: TemplateVariables = dict(variables or {})

    @property
    def template(self) -> str:
        return self._template

    @property
    def variables(self) -> TemplateVariables:
        return self._variables

    def set_template(
        self,
        template: str | None = None,
        variables: TemplateVariables | None = None,
    ) -> None:
        """Replace the template, the variables, or both.

        A missing or empty template and missing variables keep the current value.
        """
        if template:
            self._template = template
        if variables is not None:
            self._variables = dict(variables)

    def render(self) -> str:
        """Render the template with the current variables."""
        return compose(self._template, self._variables)
