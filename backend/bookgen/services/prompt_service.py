"""Prompt templates for idea, outline and chapter generation"""
from typing import List, Optional, Tuple


class PromptService:
    """Builds (system_prompt, user_prompt) pairs for each generation flow"""

    IDEAS_SYSTEM = """You are an expert nonfiction book idea generator and publishing consultant. Your task is to generate compelling, marketable nonfiction book ideas that would be suitable for Amazon KDP publishing.

Focus on topics that:
- Have proven market demand
- Can be researched and written by someone with dedication
- Appeal to specific target audiences
- Solve real problems or provide valuable insights
- Are not oversaturated in the market

Always return valid JSON with no additional text or formatting."""

    IDEAS_PROMPT = """Generate {count} compelling nonfiction book ideas for the "{genre}" genre.

{audience_line}
{interests_line}

For each book idea, provide:
- A compelling, specific title
- A detailed description (2-3 sentences) explaining what the book covers and its unique angle
- The specific target audience who would buy this book
- 4-5 key points or topics the book would cover

Return your response as a JSON array of objects with this structure:
[
  {{
    "title": "Book Title Here",
    "description": "Detailed description of what the book covers and its unique value proposition.",
    "targetAudience": "Specific target audience description",
    "keyPoints": ["Key point 1", "Key point 2", "Key point 3", "Key point 4"]
  }}
]

Make sure each idea is unique, valuable, and has clear market potential."""

    OUTLINE_SYSTEM = """You are an expert nonfiction book outline creator and publishing consultant. Your task is to create detailed, well-structured outlines for nonfiction books that would be successful on Amazon KDP.

Create outlines that:
- Have logical flow and progression
- Cover the topic comprehensively
- Are engaging and actionable for readers
- Have appropriate chapter lengths for the target word count
- Include specific, valuable content in each chapter

Always return valid JSON with no additional text or formatting."""

    OUTLINE_PROMPT = """Create a detailed outline for this nonfiction book:

Title: "{title}"
Description: {description}
Genre: {genre}
Target Word Count: {target_word_count} words
{audience_line}

Create an outline with 8-15 chapters that would total approximately {target_word_count} words. Each chapter should be substantial but focused.

For each chapter, provide:
- A compelling chapter title
- A detailed description of what the chapter covers (2-3 sentences)
- 4-6 key points or subtopics that will be discussed
- An estimated word count for the chapter

Return your response as JSON with this structure:
{{
  "title": "Final Book Title (can refine the original)",
  "chapters": [
    {{
      "id": "chapter-1",
      "title": "Chapter Title",
      "description": "Detailed description of chapter content and objectives.",
      "keyPoints": ["Key point 1", "Key point 2", "Key point 3", "Key point 4"],
      "estimatedWordCount": 4000
    }}
  ]
}}

Make sure the outline is comprehensive, well-structured, and would create a valuable book for the target audience."""

    CHAPTER_SYSTEM = """You are an expert nonfiction writer specializing in creating engaging, informative, and well-structured book chapters. Your writing should be:

- Clear and accessible to the target audience
- Well-researched and authoritative
- Engaging with real examples and practical advice
- Properly structured with smooth flow between ideas
- Action-oriented when appropriate
- Professional yet conversational in tone

Write complete chapter content that would be suitable for publication."""

    CHAPTER_PROMPT = """Write Chapter {chapter_number}: "{chapter_title}" for this nonfiction book:

BOOK CONTEXT:
- Title: "{book_title}"
- Genre: {genre}
- Description: {book_description}
- Target Audience: {target_audience}

CHAPTER DETAILS:
- Chapter Number: {chapter_number}
- Chapter Title: "{chapter_title}"
- Chapter Description: {chapter_description}
- Target Word Count: {target_word_count} words
- Key Points to Cover: {key_points}

{previous_block}Write a complete, engaging chapter that:
1. Has a strong opening that hooks the reader
2. Covers all the key points mentioned above
3. Includes practical examples, case studies, or actionable advice where appropriate
4. Maintains consistency with the book's overall tone and message
5. Concludes with a clear summary or transition to the next chapter
6. Meets approximately the target word count

Return only the chapter content as plain text, properly formatted with paragraphs. Do not include any JSON formatting or additional commentary."""

    def ideas(
        self,
        genre: str,
        target_audience: Optional[str] = None,
        key_interests: Optional[List[str]] = None,
        count: int = 3,
    ) -> Tuple[str, str]:
        prompt = self.IDEAS_PROMPT.format(
            count=count,
            genre=genre,
            audience_line=f"Target audience: {target_audience}" if target_audience else "",
            interests_line=f"Key interests: {', '.join(key_interests)}" if key_interests else "",
        )
        return self.IDEAS_SYSTEM, prompt

    def outline(
        self,
        title: str,
        description: str,
        genre: str,
        target_word_count: int,
        target_audience: Optional[str] = None,
    ) -> Tuple[str, str]:
        prompt = self.OUTLINE_PROMPT.format(
            title=title,
            description=description,
            genre=genre,
            target_word_count=target_word_count,
            audience_line=f"Target Audience: {target_audience}" if target_audience else "",
        )
        return self.OUTLINE_SYSTEM, prompt

    def chapter(
        self,
        book_title: str,
        genre: str,
        book_description: str,
        target_audience: str,
        chapter_number: int,
        chapter_title: str,
        chapter_description: str,
        key_points: List[str],
        target_word_count: int,
        previous_chapters: Optional[str] = None,
    ) -> Tuple[str, str]:
        previous_block = f"PREVIOUS CHAPTERS CONTEXT:\n{previous_chapters}\n\n" if previous_chapters else ""
        prompt = self.CHAPTER_PROMPT.format(
            book_title=book_title,
            genre=genre,
            book_description=book_description,
            target_audience=target_audience,
            chapter_number=chapter_number,
            chapter_title=chapter_title,
            chapter_description=chapter_description,
            key_points=", ".join(key_points),
            target_word_count=target_word_count,
            previous_block=previous_block,
        )
        return self.CHAPTER_SYSTEM, prompt


prompt_service = PromptService()
