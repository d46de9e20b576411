"""
Discord bot that graphs equations:
  • explicit functions (y = f(x), x = g(y))
  • circles, ellipses and hyperbolas in standard form
  • any other relation F(x, y) = G(x, y), traced by marching squares

Slash commands:
  /graph polynomial equation:"y = x^3 - 2x + 1" xmin:-5 xmax:5
  /graph conic equation:"x^2/9 + y^2/4 = 1"
  /graph trig equation:"y = 2sin(3x) + 1" resolution:800
"""

import asyncio
import io
import logging
import os
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands
from dotenv import load_dotenv

from mathgraph import GraphRequest, format_equation, format_number, render_graph

# Load .env locally if present
load_dotenv()

logging.basicConfig(
    level=os.getenv("MATHGRAPH_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s:%(levelname)s:%(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

TOKEN = os.getenv("DISCORD_BOT_TOKEN", "")
if not TOKEN:
    logger.warning("DISCORD_BOT_TOKEN not set. Set it in your hosting env.")

INTENTS = discord.Intents.default()
INTENTS.message_content = False  # we use slash commands

bot = commands.Bot(command_prefix="/", intents=INTENTS)

EMBED_COLOR = discord.Color.from_str("#DC143C")
ERROR_MESSAGE = "There was an error generating the graph. Please check your equation and try again."

COLOR_CHOICES = [
    app_commands.Choice(name="Red", value="#C2185B"),
    app_commands.Choice(name="Blue", value="#2196F3"),
    app_commands.Choice(name="Green", value="#4CAF50"),
    app_commands.Choice(name="Purple", value="#9C27B0"),
    app_commands.Choice(name="Orange", value="#FF9800"),
]

Resolution = app_commands.Range[int, 100, 1000]

graph_group = app_commands.Group(name="graph", description="Graph mathematical functions")


def _render_png(mode: str, request: GraphRequest):
    result = render_graph(request, mode=mode)
    return result, result.to_png()


def _build_embed(request: GraphRequest) -> discord.Embed:
    embed = discord.Embed(
        title=f"`{format_equation(request.equation)}`",
        description=(
            f"Domain: `[{format_number(request.xmin)}, {format_number(request.xmax)}]`, "
            f"Range: `[{format_number(request.ymin)}, {format_number(request.ymax)}]`"
        ),
        color=EMBED_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    embed.set_image(url="attachment://graph.png")
    embed.set_footer(text="mathgraph")
    return embed


async def _graph(
    interaction: discord.Interaction,
    mode: str,
    equation: str,
    xmin: Optional[float],
    xmax: Optional[float],
    ymin: Optional[float],
    ymax: Optional[float],
    color: Optional[app_commands.Choice[str]],
    resolution: Optional[int],
):
    await interaction.response.defer(thinking=True)
    try:
        request = GraphRequest.for_mode(
            mode,
            equation,
            xmin=xmin,
            xmax=xmax,
            ymin=ymin,
            ymax=ymax,
            color=color.value if color else None,
            resolution=resolution,
        )
        result, png = await asyncio.to_thread(_render_png, mode, request)
        if result.used_default:
            logger.info("Graph for %r used default shape parameters", equation)
        file = discord.File(io.BytesIO(png), filename="graph.png")
        await interaction.followup.send(embed=_build_embed(request), file=file)
    except Exception:
        logger.exception("Error generating graph for %r", equation)
        await interaction.followup.send(ERROR_MESSAGE)


_OPTION_DOCS = dict(
    xmin="Minimum x value",
    xmax="Maximum x value",
    ymin="Minimum y value",
    ymax="Maximum y value",
    color="Graph line color (default: red)",
    resolution="Number of samples (default: 500)",
)


@graph_group.command(name="polynomial", description="Graph a polynomial function")
@app_commands.describe(equation="Polynomial equation (e.g., y = x^3 - 2x + 1)", **_OPTION_DOCS)
@app_commands.choices(color=COLOR_CHOICES)
async def polynomial(
    interaction: discord.Interaction,
    equation: str,
    xmin: Optional[float] = None,
    xmax: Optional[float] = None,
    ymin: Optional[float] = None,
    ymax: Optional[float] = None,
    color: Optional[app_commands.Choice[str]] = None,
    resolution: Optional[Resolution] = None,
):
    await _graph(interaction, "polynomial", equation, xmin, xmax, ymin, ymax, color, resolution)


@graph_group.command(name="conic", description="Graph a conic section or any relation in x and y")
@app_commands.describe(equation="Conic equation (e.g., x^2/9 + y^2/4 = 1)", **_OPTION_DOCS)
@app_commands.choices(color=COLOR_CHOICES)
async def conic(
    interaction: discord.Interaction,
    equation: str,
    xmin: Optional[float] = None,
    xmax: Optional[float] = None,
    ymin: Optional[float] = None,
    ymax: Optional[float] = None,
    color: Optional[app_commands.Choice[str]] = None,
    resolution: Optional[Resolution] = None,
):
    await _graph(interaction, "conic", equation, xmin, xmax, ymin, ymax, color, resolution)


@graph_group.command(name="trig", description="Graph a trigonometric function")
@app_commands.describe(equation="Trig equation (e.g., y = 2sin(3x) + 1)", **_OPTION_DOCS)
@app_commands.choices(color=COLOR_CHOICES)
async def trig(
    interaction: discord.Interaction,
    equation: str,
    xmin: Optional[float] = None,
    xmax: Optional[float] = None,
    ymin: Optional[float] = None,
    ymax: Optional[float] = None,
    color: Optional[app_commands.Choice[str]] = None,
    resolution: Optional[Resolution] = None,
):
    await _graph(interaction, "trig", equation, xmin, xmax, ymin, ymax, color, resolution)


bot.tree.add_command(graph_group)


@bot.event
async def on_ready():
    try:
        synced = await bot.tree.sync()
        logger.info("Synced %d commands. Logged in as %s.", len(synced), bot.user)
    except Exception:
        logger.exception("Command sync failed")


if __name__ == "__main__":
    bot.run(TOKEN, log_handler=None)
