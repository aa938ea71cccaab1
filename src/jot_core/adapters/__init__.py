"""Bring conversations from other frameworks into a jot history.

An adapter turns a framework's transcript into the ``Message`` list that
``Agent.run`` continues from. System prompts are dropped on the way in,
since the agent sends its own.

Example:
    ```python
    from langchain_core.messages import AIMessage, HumanMessage
    from jot_core.adapters.langchain import LangChainAdapter

    history = LangChainAdapter().convert([
        HumanMessage(content="Remind me to call Sam"),
        AIMessage(content="When?"),
    ])
    result = await agent.run(history, "Tomorrow at 9")
    ```

``LangChainAdapter`` is imported from its module so that langchain-core
stays optional.
"""

from jot_core.adapters.protocol import MessageAdapter

__all__ = ["MessageAdapter"]
