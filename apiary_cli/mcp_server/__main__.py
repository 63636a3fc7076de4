from apiary_cli.mcp_server import main

main()
