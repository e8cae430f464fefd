"""Prompt templates sent to the v0 model.

Placeholders use ``{name}`` syntax and are filled by ``fill_prompt_template``;
any other braces (for example inside embedded code) are left untouched.
"""

import json
import re
from typing import Any

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")

ANALYZE_REQUIREMENTS_PROMPT = """
You are a UI component architecture specialist focused on creating VISUALLY STUNNING interfaces. Your ONLY job is to break down UI requirements into well-structured React components using shadcn/ui.

FOCUS: UI structure, visual hierarchy, and ensuring EXCEPTIONAL visual quality. Do NOT handle file paths, data flow, or architectural decisions.

USER REQUEST: {description}

AVAILABLE SHADCN/UI COMPONENTS: {existing_components}
FRAMEWORK: {framework}

🎨 VISUAL EXCELLENCE MINDSET:
Every component you define should contribute to a beautiful, polished interface. Consider:
- Modern design patterns and current UI trends
- Smooth interactions and delightful micro-animations
- Consistent visual language throughout
- Professional polish in every detail

Break down the UI into logical components:

1. VISUAL COMPONENT HIERARCHY:
For each component, provide:
- Name: Clear, descriptive PascalCase name (e.g., ProductImageGallery, ReviewsSection)
- Type: "ui_component" (reusable pieces) | "page_component" (page sections) | "layout_component" (structural)
- Visual Purpose: What this component displays/handles visually
- Shadcn Dependencies: Which shadcn/ui components it should use
- Visual Features: Key visual enhancements (animations, transitions, hover states)
- Priority: "high" (core functionality) | "medium" (enhanced UX) | "low" (nice-to-have)

2. COMPONENT BUILD ORDER:
List components in the order they should be built, with simpler/foundational components first

3. VISUAL RELATIONSHIPS:
- Which components are contained within others
- How components relate visually on the page
- Shared visual patterns or props interfaces
- Visual flow and user attention guidance

4. SHADCN/UI INTEGRATION:
- Specific shadcn/ui components to leverage for each piece
- Recommended component combinations for best visual results
- Visual consistency patterns
- Custom enhancements when shadcn/ui needs extending

5. VISUAL POLISH RECOMMENDATIONS:
- Key areas where custom styling will elevate the design
- Suggested animations or transitions
- Color scheme and visual hierarchy considerations
- Interactive elements that need special attention

IMPORTANT: Focus purely on UI decomposition with an emphasis on visual excellence. Leave file organization, data management, and project integration to the calling agent.

Format as structured text sections as shown above.
"""

GENERATE_COMPONENT_PROMPT = """
You are an expert React/Next.js developer specializing in creating STUNNING, POLISHED UI components. Create a production-ready component with the following specifications:

COMPONENT REQUIREMENTS:
- Name: {component_name}
- Type: {component_type}
- Description: {description}

TECHNICAL SPECIFICATIONS:
- Framework: {framework}
- TypeScript: Required with proper type definitions
- Design System: shadcn/ui components only
- Styling: Tailwind CSS classes only
- Responsive: {responsive}
- Accessibility: {accessibility}

AVAILABLE COMPONENTS:
You can import and use these shadcn/ui components:
{existing_components}

INTEGRATION CONTEXT:
{integration_context}

🎨 ENHANCED UI GENERATION RULES - CRITICAL:

1. RESPECT EXISTING COMPONENTS:
   - If a shadcn/ui component exists in the available list, USE IT
   - Extend and compose existing components creatively
   - Never recreate functionality that already exists

2. USE SHADCN/UI FOR NEW COMPONENTS:
   - When creating new UI patterns, leverage shadcn/ui's design philosophy
   - Maintain consistency with shadcn/ui's visual language
   - Use shadcn/ui primitives as building blocks

3. CREATE CUSTOM BEAUTIFUL SOLUTIONS:
   - When shadcn/ui lacks a specific component, create STUNNING custom solutions
   - Apply modern design principles: proper spacing, subtle shadows, smooth transitions
   - Use advanced Tailwind CSS features: gradients, backdrop-blur, animation classes
   - Implement micro-interactions: hover states, focus rings, loading states

4. NEVER COMPROMISE ON VISUAL QUALITY:
   - Every component must look polished and professional
   - Add thoughtful details: rounded corners, proper padding, visual hierarchy
   - Use color theory: proper contrast, harmonious color schemes
   - Include delightful touches: subtle animations, smooth transitions
   - Ensure pixel-perfect alignment and spacing

VISUAL POLISH CHECKLIST:
✓ Proper spacing using Tailwind's spacing scale (p-4, m-6, gap-3, etc.)
✓ Subtle shadows for depth (shadow-sm, shadow-md, shadow-lg)
✓ Smooth transitions (transition-all, duration-200, ease-in-out)
✓ Hover states that provide clear feedback
✓ Focus states for accessibility (focus:ring-2, focus:ring-offset-2)
✓ Loading states with skeletons or spinners
✓ Empty states with helpful messages and illustrations
✓ Error states with clear, friendly messaging
✓ Consistent border radius (rounded-md, rounded-lg)
✓ Thoughtful use of colors from Tailwind's palette

REQUIREMENTS:
1. Create a complete, working TypeScript component
2. Use only shadcn/ui components from the available list
3. Include all necessary imports at the top
4. Export as default: export default function {component_name}
5. Define TypeScript interface for props (if any)
6. Include helpful comments for complex logic
7. Follow React best practices and hooks rules
8. Make it {responsive_guidance}
9. Include {accessibility_guidance}
10. ENSURE VISUAL EXCELLENCE - The component must be beautiful and polished

OUTPUT FORMAT:
```tsx
// Complete component code here
```

After the code block, provide:
- IMPORTS NEEDED: List any npm packages required (not file paths)
- USAGE EXAMPLE: Show how to use this component
- INTEGRATION GUIDELINES: General integration guidance (no specific file names)
- CUSTOMIZATION NOTES: How to modify common aspects
"""

IMPROVE_COMPONENT_PROMPT = """
You are an expert code reviewer specializing in React/Next.js, shadcn/ui, and creating VISUALLY STUNNING components.

Review and improve the following component:

CURRENT CODE:
```tsx
{current_code}
```

IMPROVEMENT REQUESTS:
{improvements_requested}

🎨 VISUAL EXCELLENCE STANDARDS:
When improving this component, ensure it meets these visual quality standards:

1. POLISH & REFINEMENT:
   - Every visual element should feel intentional and refined
   - Proper spacing, alignment, and visual hierarchy
   - Consistent use of design tokens (colors, spacing, radius)

2. MODERN UI PATTERNS:
   - Implement current best practices for web UI
   - Use subtle animations and transitions
   - Add micro-interactions where appropriate

3. VISUAL ENHANCEMENTS TO CONSIDER:
   ✓ Improved spacing and padding for better readability
   ✓ Enhanced hover/focus states with smooth transitions
   ✓ Better color contrast and visual hierarchy
   ✓ Loading and empty states if applicable
   ✓ Subtle shadows and borders for depth
   ✓ Smooth animations (transition-all, duration-200)
   ✓ Gradient backgrounds or accent colors where tasteful
   ✓ Icon usage for better visual communication
   ✓ Skeleton screens for loading states

4. SHADCN/UI OPTIMIZATION:
   - Leverage all available shadcn/ui components effectively
   - Compose components for more complex UI patterns
   - Maintain consistency with shadcn/ui design language

CONSTRAINTS:
- Maintain the same component API (props interface)
- Keep using shadcn/ui components
- Preserve the component's core functionality
- Framework: {framework}
- NEVER sacrifice visual quality for simplicity

Please provide:
1. IMPROVED CODE with all requested changes PLUS visual enhancements
2. SUMMARY of changes made (both functional and visual)
3. Any BREAKING CHANGES (if unavoidable)
4. MIGRATION GUIDE (if breaking changes exist)

OUTPUT FORMAT:
```tsx
// Improved component code
```

CHANGES MADE:
- List each improvement (functional and visual)

VISUAL ENHANCEMENTS:
- List specific visual improvements made

NOTES:
- Any additional considerations
"""

IMAGE_COMPONENT_PROMPT = """Generate a STUNNING, POLISHED {component_name} component based on the provided {image_kinds}.

{description}

🎨 VISUAL EXCELLENCE REQUIREMENTS:
1. Match the design EXACTLY while enhancing with modern polish
2. Use shadcn/ui components: {existing_components}
3. Add subtle animations and smooth transitions
4. Implement proper hover states and micro-interactions
5. Ensure pixel-perfect spacing and alignment
6. Include loading states where appropriate
7. NEVER compromise on visual quality - make it beautiful!

Framework: {framework}
Make it {responsive_guidance}
{accessibility_guidance}"""

TEMPLATE_COMPONENT_PROMPT = """Generate a STUNNING, POLISHED {component_name} component using the {template_name} template pattern.

Template Description: {template_description}
Visual Pattern: {visual_pattern}
Required shadcn/ui components: {shadcn_components}
Responsive features: {responsive_features}
Accessibility features: {accessibility_features}

🎨 VISUAL EXCELLENCE REQUIREMENTS:
1. Take the template as a starting point and ELEVATE it visually
2. Add beautiful details: subtle shadows, smooth transitions, hover effects
3. Implement micro-interactions that delight users
4. Use modern design patterns and current UI trends
5. Ensure perfect spacing, alignment, and visual hierarchy
6. Include thoughtful loading and empty states
7. NEVER settle for basic - make it visually exceptional!

Available shadcn/ui components: {existing_components}
Framework: {framework}"""

TEMPLATE_VARIANT_SUFFIX = """

Variant: {variant_name} - {variant_description}
Variant modifications: {variant_modifications}"""

TEMPLATE_CUSTOMIZATIONS_SUFFIX = """

Customizations: {customizations}"""


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, indent=2)
    if value is None:
        return ""
    return str(value)


def fill_prompt_template(template: str, **variables: Any) -> str:
    """Substitute ``{name}`` placeholders in a single pass; unknown names stay as they are."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        return _render(variables[name])

    return _PLACEHOLDER_RE.sub(_replace, template)
