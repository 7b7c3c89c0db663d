from sdlc_mcp.cli import main

main()
