from langchain_core.prompts import PromptTemplate

SUMMARY_TEMPLATE = """Write a concise summary of the following transcript of a YouTube video:


"{text}"


CONCISE SUMMARY:"""

COMBINE_TEMPLATE = """The following are summaries of consecutive parts of a YouTube video transcript:


"{text}"


Combine these partial summaries into one concise, coherent summary of the whole video.
CONCISE SUMMARY:"""

REFINE_TEMPLATE = """Your job is to produce a final summary of a YouTube video transcript.
We have provided an existing summary up to a certain point: "{existing_answer}"
We have the opportunity to refine the existing summary (only if needed) with some more context below.
------------
"{text}"
------------
Given the new context, refine the original summary.
If the context isn't useful, return the original summary.
Keep the result a summary, not a concatenation of everything seen so far.
REFINED SUMMARY:"""

SUMMARY_PROMPT = PromptTemplate.from_template(SUMMARY_TEMPLATE)
COMBINE_PROMPT = PromptTemplate.from_template(COMBINE_TEMPLATE)
REFINE_PROMPT = PromptTemplate.from_template(REFINE_TEMPLATE)
