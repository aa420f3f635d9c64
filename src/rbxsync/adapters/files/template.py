"""Commented starter config written by ``rbxsync init``."""

from __future__ import annotations

DEFAULT_TEMPLATE = """\
# rbxsync configuration

[experience]
universe_id = 0        # Your Roblox universe ID

[experience.creator]
type = "user"          # "user" or "group"
id = 0                 # Your Roblox user or group ID

# Codegen: generate a Luau module with asset IDs
# [codegen]
# output = "src/shared/GameIds.luau"
# typescript = false           # Also generate a .d.ts file
# style = "flat"               # "flat" (default) or "nested"
#                              # flat:   GameIds["passes.VIP"]
#                              # nested: GameIds.passes.VIP
#
# Custom paths, dot-separated, used as prefix (flat) or nesting (nested)
# [codegen.paths]
# passes = "player.vips"
# products = "shop.items"
#
# Extra entries: pre-existing assets injected into the generated file
# [codegen.extra]
# "passes.legacy_vip" = 1234567

# Icon settings
# [icons]
# bleed = true         # Apply alpha bleed (fixes resize artifacts)
# dir = "icons"        # Directory for downloaded icons

# Game Passes
# [passes.VIP]
# name = "VIP Pass"        # optional, defaults to the key ("VIP")
# price = 499
# description = "VIP access"
# icon = "icons/vip.png"
# for_sale = true          # optional, defaults to true
# regional_pricing = false # optional, defaults to false
# path = "shop.specials"   # optional, overrides the codegen path

# Badges
# [badges.Welcome]
# name = "Welcome Badge"
# description = "Welcome to the game!"
# icon = "icons/welcome.png"
# enabled = true
# path = "rewards"

# Developer Products
# [products.Coins100]
# name = "100 Coins"
# price = 99               # required
# description = "100 coins"
# icon = "icons/coins.png"
# for_sale = true
# regional_pricing = false
# store_page = false
# path = "shop.specials"
"""
